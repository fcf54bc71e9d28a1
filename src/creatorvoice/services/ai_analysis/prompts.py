"""Prompt text for batched voice analysis."""

SYSTEM_PROMPT = (
    "You are a strict JSON generator. Return ONLY valid JSON matching the schema. "
    "No markdown, no commentary, no code fences."
)

_SCHEMA_HEADER = """\
Return ONLY valid JSON with this schema and no markdown/code fences.

{
  "templates": {
    "hooks": [{ "pattern": "string", "variables": ["string"], "sourceIndex": 1 }],
    "bridges": [{ "pattern": "string", "variables": ["string"], "sourceIndex": 1 }],
    "ctas": [{ "pattern": "string", "variables": ["string"], "sourceIndex": 1 }],
    "nuggets": [{ "pattern": "string", "structure": "string", "variables": ["string"], "sourceIndex": 1 }]
  },
  "styleSignature": {
    "powerWords": ["string"],
    "fillerPhrases": ["string"],
    "transitionPhrases": ["string"],
    "avgWordsPerSentence": 0,
    "tone": "string"
  },
  "transcripts": [{
    "index": 1,
    "hook": {"text": "string", "duration": 0, "type": "string", "emotionalTrigger": "string", "template": "string", "variables": {}},
    "bridge": {"text": "string", "transitionType": "string", "duration": 0, "template": "string", "variables": {}},
    "goldenNugget": {"text": "string", "valueType": "string", "deliveryMethod": "string", "duration": 0, "structure": "string", "keyPoints": ["string"], "template": "string", "variables": {}},
    "cta": {"text": "string", "type": "string", "placement": "string", "urgency": "string", "template": "string", "variables": {}},
    "microHooks": [{"text": "string", "position": 0, "purpose": "string", "template": "string", "variables": {}}]
  }]
}"""

_ANALYSIS_INSTRUCTION = """\
Analyze these {count} video transcripts and create reusable templates. For each transcript:

1. EXTRACT THE SECTIONS:
- Hook (first 3-5 seconds that grabs attention)
- Bridge (transition that sets up the main content)
- Golden Nugget (the main value/lesson/information)
- Why to Act (the closing reason to take action)

2. CREATE TEMPLATES from the hooks by replacing specific details with [VARIABLES]:
Example: "I made $5000 in 2 days" -> "I [achievement] in [timeframe]"

3. DOCUMENT THE CREATOR'S STYLE:
- Common words/phrases they repeat
- Sentence length (short/long/mixed)
- Transition words between sections
- Speaking pace indicators (pauses, emphasis)

{placeholders}"""

_DENSITY_REQUIREMENT = """\
TEMPLATE DENSITY REQUIREMENTS:
- Produce exactly {count} items in each of templates.hooks, templates.bridges, templates.nuggets, templates.ctas.
- Map one item per transcript and set sourceIndex to that transcript's index (1-based).
- Do NOT deduplicate or merge similar templates across transcripts - include them separately even if identical.
- Keep patterns generalized with [VARIABLES], but preserve distinct phrasing per transcript."""


def build_batch_prompt(transcripts: list[str]) -> str:
    """Compose the analysis prompt for one batch of transcript texts.

    Transcripts are numbered from 1 in the order given; that number is the
    local ``sourceIndex`` the model must report.
    """
    count = len(transcripts)
    placeholders = "\n".join(f"[INSERT TRANSCRIPT {i}]" for i in range(1, count + 1))
    blocks = "\n".join(
        f"\n[INSERT TRANSCRIPT {i}]\n{text or ''}"
        for i, text in enumerate(transcripts, start=1)
    )
    return "\n\n".join(
        [
            _SCHEMA_HEADER,
            _ANALYSIS_INSTRUCTION.format(count=count, placeholders=placeholders),
            _DENSITY_REQUIREMENT.format(count=count),
        ]
    ) + "\n" + blocks
