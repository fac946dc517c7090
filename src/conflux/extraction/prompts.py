"""Prompt template for entity extraction from meeting notes and transcripts.

The known-roster hint lists let the model expand partial names ("John")
toward people already in the workspace.
"""

from __future__ import annotations

from collections.abc import Iterable

PROMPT_VERSION = "1.1.0"

EXTRACTION_PROMPT = """You are an entity extraction system for a professional network/CRM application.

Analyze the following meeting notes or conversation transcript and extract:
1. **People** - Names of individuals mentioned (including partial names like "John" or nicknames)
2. **Organizations** - Companies, institutions, or groups mentioned
3. **Topics** - Key discussion topics or themes

For each entity, provide:
- type: "person", "organization", or "topic"
- name: The name as mentioned (preserve original form)
- context: A brief phrase explaining their role/relevance in this context
- confidence: 0.0-1.0 score for how confident you are this is a real entity (not a common word)
- alternativeNames: For people, include possible full name variations if only a first name is given
- title: For people, their job title or role if stated (omit otherwise)
- organization: For people, the organization they belong to if stated (omit otherwise)

Also generate a 1-2 sentence summary of the interaction.

IMPORTANT RULES:
- For partial names (e.g., "John"), set confidence lower (0.5-0.7) and suggest possible full names
- For full names or clear entities, set confidence higher (0.8-1.0)
- Ignore generic terms that aren't specific entities
- Include role/title information in context if mentioned

Respond ONLY with valid JSON in this format:
{
  "entities": [
    {
      "type": "person",
      "name": "John",
      "context": "discussed the Q4 roadmap",
      "confidence": 0.6,
      "alternativeNames": ["John Smith", "John Doe"],
      "title": "VP Engineering",
      "organization": "Acme Corp"
    }
  ],
  "summary": "Brief summary of the interaction"
}"""


def build_extraction_prompt(
    text: str,
    known_people: Iterable[tuple[str, str | None]] = (),
    known_orgs: Iterable[str] = (),
) -> str:
    """Assemble the full extraction prompt.

    Args:
        text: Transcript or notes to analyze.
        known_people: (full_name, title) pairs from the workspace roster.
        known_orgs: Organization names from the workspace roster.

    Returns:
        Prompt string for a single user message.
    """
    sections = [EXTRACTION_PROMPT]

    people_lines = [
        f"- {name} ({title})" if title else f"- {name}" for name, title in known_people
    ]
    if people_lines:
        sections.append(
            "KNOWN PEOPLE IN SYSTEM (use for matching partial names):\n" + "\n".join(people_lines)
        )

    org_lines = [f"- {name}" for name in known_orgs]
    if org_lines:
        sections.append("KNOWN ORGANIZATIONS IN SYSTEM:\n" + "\n".join(org_lines))

    sections.append(f"TEXT TO ANALYZE:\n{text}")
    return "\n\n".join(sections)
