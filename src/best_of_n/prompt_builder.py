"""
Prompt Builder

Builds the auxiliary prompts used after sampling:

- selection: pick the best of one model's samples (JSON verdict)
- brainstorm: merge every distinct idea across one model's samples
- cross-model: consensus / disagreement synthesis across models
- cross-model brainstorm: master idea list across models

Samples are numbered 1..k by their position in the list handed over; the
selection judge's best_index refers to that numbering.
"""

from dataclasses import dataclass

from best_of_n.domain.entities import SampleResult


@dataclass(frozen=True)
class RepresentativeOutput:
    """One model's representative output handed to cross-model synthesis"""
    model_id: str
    display_name: str
    response: str
    sample_count: int
    best_index: int = 0


def _samples_section(samples: list[SampleResult]) -> str:
    return "\n---\n\n".join(
        f"### Sample {position}\n\n{sample.response}\n"
        for position, sample in enumerate(samples, start=1)
    )


def build_comparison_prompt(
    model_name: str,
    original_prompt: str,
    samples: list[SampleResult],
) -> str:
    """Prompt asking the judge to pick the best sample and classify the variation"""
    count = len(samples)
    parts: list[str] = [
        "# Per-model comparison",
        "",
        f"You are comparing {count} responses from the same model (**{model_name}**) to the same prompt, "
        "generated with temperature variation. Your job is to pick the best one and analyse the variation.",
        "",
        "## Original prompt",
        "",
        original_prompt,
        "",
        "## Responses",
        "",
        _samples_section(samples),
        "---",
        "",
        "## Instructions",
        "",
        "Respond with EXACTLY this JSON structure (no markdown fencing, no extra text):",
        "",
        "{",
        '  "best_index": <1-based index of best response>,',
        '  "reasoning": "<1-2 sentences explaining why this response is best>",',
        '  "consistent_points": ["<point that appears in most/all samples: high confidence>"],',
        '  "unique_points": ["<point unique to one sample: creative or potentially hallucinated>"],',
        '  "contradictions": ["<point where samples disagree with each other>"]',
        "}",
        "",
        "### Selection criteria (in order of importance)",
        "",
        "1. **Accuracy**: fewest factual errors or unsupported claims",
        "2. **Completeness**: covers the question thoroughly",
        "3. **Clarity**: well-organised, easy to follow",
        "4. **Specificity**: concrete details over vague generalities",
        "",
        "Pick the response that best combines these qualities. "
        "If responses are very similar, prefer the one with the clearest structure.",
    ]
    return "\n".join(parts)


def build_brainstorm_prompt(
    model_name: str,
    original_prompt: str,
    samples: list[SampleResult],
) -> str:
    """Prompt asking the judge to merge all distinct ideas, annotated with how many samples had them"""
    count = len(samples)
    parts: list[str] = [
        "# Brainstorm idea extraction",
        "",
        f"You are reviewing {count} responses from the same model (**{model_name}**) to the same "
        "brainstorming prompt, generated with temperature variation. Your job is to extract and merge "
        "ALL unique ideas into one comprehensive list.",
        "",
        "## Original prompt",
        "",
        original_prompt,
        "",
        "## Responses",
        "",
        _samples_section(samples),
        "---",
        "",
        "## Instructions",
        "",
        f"Create a **single merged list** of every distinct idea across all {count} samples.",
        "",
        "For each idea:",
        "- Use the best name from any sample (or improve it slightly)",
        "- Write the best 2-sentence description, drawing from whichever sample described it most compellingly",
        f"- Note in parentheses how many of the {count} samples included this or a very similar idea, "
        f'e.g. "(3/{count} samples)" or "(1/{count} unique)"',
        "",
        "### Rules",
        "1. **Include everything**: if an idea appeared in even one sample, include it",
        "2. **Merge duplicates**: combine ideas that are essentially the same concept into one entry, "
        "keeping the best phrasing",
        "3. **Preserve novelty**: ideas unique to one sample are often the most creative; never drop them",
        "4. **Mirror the format**: use the same structural format as the original responses",
        "",
        'After the list, add a line containing only "---" and then 2-3 sentences noting: how many total '
        "unique ideas were found, how many recurred across most samples, and how many were unique to a "
        "single sample.",
        "",
        "Output ONLY the merged list and the brief note. No other preamble or meta-commentary.",
    ]
    return "\n".join(parts)


def _responses_section(outputs: list[RepresentativeOutput], label: str) -> str:
    return "\n---\n\n".join(
        f"## {o.display_name} ({label} {o.sample_count} samples)\n\n{o.response}\n"
        for o in outputs
    )


def build_cross_model_prompt(
    original_prompt: str,
    outputs: list[RepresentativeOutput],
) -> str:
    """Prompt for the executive consensus/disagreement synthesis"""
    parts: list[str] = [
        "# Cross-model synthesis (best-of-N)",
        "",
        f"You are synthesising the best responses from {len(outputs)} AI models. Each response was selected "
        "as the best out of N samples (generated with temperature variation), so these represent each "
        "model's strongest output.",
        "",
        "## Original prompt",
        "",
        original_prompt,
        "",
        "## Best responses",
        "",
        _responses_section(outputs, "best of"),
        "---",
        "",
        "## Synthesis task",
        "",
        "Create an **executive synthesis** that:",
        "- Summarises the key consensus in 2-3 sentences",
        "- Lists 4-6 key findings as bullet points",
        "- Notes any disagreements with brief analysis",
        "- Highlights unique insights worth preserving",
        "",
        "### Key principles",
        "",
        "1. **Identify consensus**: What do multiple models agree on? This is likely reliable.",
        "2. **Highlight unique insights**: What did only one model mention that's valuable? "
        'Tag the source, e.g. "[From GPT-5.2]". Don\'t discard these just because others didn\'t mention them.',
        "3. **Flag disagreements**: Where do models contradict? Present both positions fairly and "
        "analyse which seems more credible and why.",
        "4. **Remove duplication**: Don't repeat the same point multiple times.",
        "5. **Preserve nuance**: Keep qualifications and uncertainty expressed by models.",
        "",
        "### Output format",
        "",
        "### Executive summary",
        "[2-3 sentences capturing the core answer]",
        "",
        "### Key findings",
        "- [Bullet points of main findings]",
        "",
        "### Points of disagreement",
        '- [Any contradictions, or "None significant" if models agreed]',
        "",
        "### Unique insights",
        "- **[Model name]**: [Notable insight only this model provided]",
        "",
        "### Confidence level",
        "[One sentence on how confident we should be based on model agreement]",
        "",
        "---",
        "",
        "Please generate the synthesis now.",
    ]
    return "\n".join(parts)


def build_brainstorm_cross_model_prompt(
    original_prompt: str,
    outputs: list[RepresentativeOutput],
) -> str:
    """Prompt for the cross-model master idea list"""
    parts: list[str] = [
        "# Cross-model brainstorm synthesis",
        "",
        f"You are synthesising brainstorming results from {len(outputs)} AI models. Each model was queried "
        "multiple times with temperature variation, and their responses were merged into comprehensive "
        "idea lists. Your job is to create the ultimate combined list.",
        "",
        "## Original prompt",
        "",
        original_prompt,
        "",
        "## Merged ideas per model",
        "",
        _responses_section(outputs, "merged from"),
        "---",
        "",
        "## Synthesis task",
        "",
        "Create a **comprehensive master list** of all ideas, organised into thematic clusters.",
        "",
        "### Goals",
        "1. **Include every unique idea**: if any model proposed it, include it",
        "2. **Merge duplicates across models**: note when multiple models independently proposed the same "
        "idea (strong signal)",
        "3. **Preserve the best framing**: for each idea, use whichever model's name and description was "
        "most compelling",
        "4. **Tag sources**: after each idea, note which models proposed it in brackets",
        "5. **Cluster by theme**: group related ideas under thematic headings",
        "",
        "### Output format",
        "",
        "For each theme:",
        "",
        "### [Theme name]",
        "",
        "1. **[Idea name]**: [Best 2-sentence description]. [Source models]",
        "2. ...",
        "",
        "Then at the end:",
        "",
        "---",
        "",
        "### Summary statistics",
        "- Total unique ideas across all models: [count]",
        "- Ideas proposed by multiple models independently: [count] (highest confidence)",
        "- Ideas unique to one model: [count] (most novel)",
        "",
        "### Top 5 most promising ideas",
        "[Brief ranked list with 1-sentence justification each]",
        "",
        "---",
        "",
        "Please generate the synthesis now.",
    ]
    return "\n".join(parts)
