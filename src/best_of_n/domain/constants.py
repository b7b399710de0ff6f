"""
Domain Constants

Centrally manages constants shared across the best-of-N pipeline.
"""

# Hard-coded run defaults (lowest precedence: CLI > preset > these)
DEFAULT_NUM_SAMPLES = 4
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TIMEOUT_SECONDS = 180
DEFAULT_PRESET = "quick"
DEFAULT_MAX_TOKENS = 8000

# Start offset between samples of the same model (seconds per ordinal position)
SAMPLE_STAGGER_SECONDS = 0.1

# Progress render interval (seconds)
PROGRESS_RENDER_INTERVAL = 0.5

# Provider kinds
PROVIDER_OPENAI = "openai"
PROVIDER_GOOGLE = "google"
PROVIDER_XAI = "xai"
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_LMSTUDIO = "lmstudio"
PROVIDER_OPENAI_DEEP = "openai-deep"
PROVIDER_GEMINI_DEEP = "gemini-deep"

# Providers that only run asynchronously (deep research) and cannot join the fan-out
ASYNC_ONLY_PROVIDERS = frozenset({PROVIDER_OPENAI_DEEP, PROVIDER_GEMINI_DEEP})

SYNC_PROVIDERS = frozenset({
    PROVIDER_OPENAI,
    PROVIDER_GOOGLE,
    PROVIDER_XAI,
    PROVIDER_ANTHROPIC,
    PROVIDER_LMSTUDIO,
})

# Judge / synthesis models (provider model ids, not catalog ids)
PRIMARY_JUDGE_MODEL = "gemini-3-flash-preview"
PRIMARY_JUDGE_PROVIDER = PROVIDER_GOOGLE
SECONDARY_JUDGE_MODEL = "claude-sonnet-4-5-20250929"
SECONDARY_JUDGE_PROVIDER = PROVIDER_ANTHROPIC
SYNTHESIS_MODEL = "claude-opus-4-6"
SYNTHESIS_PROVIDER = PROVIDER_ANTHROPIC

# Anthropic extended thinking budget for reasoning models
THINKING_BUDGET_TOKENS = 10000

# Returned by the synthesiser when no model produced output
NOTHING_TO_SYNTHESISE = "No successful responses to synthesise."
