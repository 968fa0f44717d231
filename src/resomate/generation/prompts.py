from resomate.generation.models import GenerationRequest

Messages = list[tuple[str, str]]

RESOLUTION_SCHEMA_HINT = """{
  "preamble": [
    {"type": "clause", "text": "clause text"},
    {"type": "citation", "text": "clause text", "citation": "source"}
  ],
  "operative": [
    {"number": 1, "text": "operative clause text", "subClauses": [{"letter": "a", "text": "sub-clause text"}]}
  ]
}"""

SPEECH_SCHEMA_HINT = """{
  "title": "speech title",
  "body": "full speech text"
}"""

RHETORIC_SCHEMA_HINT = """[
  {"type": "question", "headline": "...", "examples": ["...", "..."]},
  {"type": "repetition", "headline": "...", "examples": ["...", "..."]},
  {"type": "emotive", "headline": "...", "examples": ["...", "..."]},
  {"type": "contrast", "headline": "...", "examples": ["...", "..."]}
]"""


def resolution_primary(request: GenerationRequest) -> Messages:
    lines = [
        "Generate a UN-style resolution with the following specifications:",
        "",
        f"Title: {request.title}",
        f"Committee: {request.committee}",
        f"Topic: {request.topic}",
        f"Country/Delegation: {request.country}",
        f"Urgency Level: {request.urgency}",
        f"Focus Area: {request.focus}",
        f"Tone: {request.tone}",
        f"Length: {request.length}",
        f"Include Statistics: {str(request.include_statistics).lower()}",
        f"Include Citations: {str(request.include_citations).lower()}",
    ]
    if request.custom_instructions:
        lines.append(f"Custom Instructions: {request.custom_instructions}")
    lines += [
        "",
        "Write preambular clauses opening with words such as Recognizing, Noting or Concerned,",
        "and numbered operative clauses opening with action verbs such as Calls upon, Requests or Decides.",
        "Relevant statistics where appropriate." if request.include_statistics else "No statistics required.",
        "Cite sources in UN format." if request.include_citations else "No citations required.",
        "",
        "Respond only with JSON of this shape:",
        RESOLUTION_SCHEMA_HINT,
    ]
    return [
        (
            "system",
            "You are an expert UN resolution writer. Use proper UN format and diplomatic language. "
            "Always respond with valid JSON.",
        ),
        ("user", "\n".join(lines)),
    ]


def resolution_secondary(request: GenerationRequest) -> Messages:
    return [
        ("system", "Generate a UN resolution in JSON format. Be concise and diplomatic."),
        (
            "user",
            f"Create a resolution about {request.topic} for {request.country}. "
            f"Return JSON with preamble and operative arrays:\n{RESOLUTION_SCHEMA_HINT}",
        ),
    ]


def speech_primary(request: GenerationRequest) -> Messages:
    prompt = "\n".join(
        [
            "Generate a compelling UN-style diplomatic speech for the following context:",
            "",
            f"Title: {request.title}",
            f"Committee: {request.committee}",
            f"Topic: {request.topic}",
            f"Country/Delegation: {request.country}",
            "",
            "Open with a diplomatic greeting, state the country's position, address the key aspects",
            "of the topic and close with a call to action. Aim for 400-500 words.",
            "",
            "Respond only with JSON of this shape:",
            SPEECH_SCHEMA_HINT,
        ]
    )
    return [
        ("system", "You are an expert UN speechwriter. Respond with valid JSON."),
        ("user", prompt),
    ]


def speech_secondary(request: GenerationRequest) -> Messages:
    return [
        ("system", "Generate a diplomatic speech in JSON format. Be concise."),
        (
            "user",
            f"Create a UN speech for {request.country} about {request.topic}. "
            f"Return JSON:\n{SPEECH_SCHEMA_HINT}",
        ),
    ]


def rhetoric_primary(request: GenerationRequest) -> Messages:
    prompt = "\n".join(
        [
            f'Generate rhetorical devices for a UN-style diplomatic speech on the topic: "{request.topic}"',
            "",
            "Provide four categories (rhetorical questions, repetition/parallelism, emotive appeals, contrasts),",
            "each with a one-sentence headline and 2-3 examples tailored to the topic.",
            "Keep the tone formal, diplomatic and appropriate for UN debate.",
            "",
            "Respond only with JSON of this shape:",
            RHETORIC_SCHEMA_HINT,
        ]
    )
    return [
        (
            "system",
            "You are an expert in diplomatic rhetoric and UN-style debate. Respond with valid JSON.",
        ),
        ("user", prompt),
    ]


def rhetoric_secondary(request: GenerationRequest) -> Messages:
    return [
        ("system", "Generate rhetorical devices for diplomatic speeches in JSON format."),
        (
            "user",
            f"Create rhetorical devices for a speech about {request.topic}. "
            f"Include questions, repetition, emotional appeals and contrasts. Return JSON:\n{RHETORIC_SCHEMA_HINT}",
        ),
    ]
