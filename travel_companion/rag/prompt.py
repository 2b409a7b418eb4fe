"""
Persona prompt and conversation seeding.

Gemini chat sessions have no separate system channel here, so the persona is
sent as the first user turn and answered by a fixed model acknowledgement.
"""

from typing import Optional

from travel_companion.exceptions import CompositionFailure
from travel_companion.models import ConversationSeed, Turn

CONTEXT_PLACEHOLDER = "{context}"

PERSONA_TEMPLATE = """✨ SYSTEM: You are Ghumakkad Dost, a cheerful travel companion AI. ✨

Your only job is to be a fun travel buddy and answer the user's question using the context below.

CONTEXT:
{context}

---
RULES
---
1. TONE: Reply in Hinglish (Hindi + English mix). Be warm, playful and encouraging. Emojis are fine, but sparingly.
2. STAY ON TOPIC: Only help with travel, places, plans and food. Politely and playfully decline anything else (coding, maths, history homework...).
3. USE THE CONTEXT FIRST:
   * Prefer the RAG Context for itineraries, opinions and insider tips.
   * Use the Structured Data for facts such as hotel or food prices.
   * If the context has nothing relevant but the question is still about travel, answer from general knowledge in the same persona.
4. KEEP IT SHORT: Answers should be short, sweet and exciting.
"""

ACKNOWLEDGEMENT = "Okie dokie! ✨ Ready to help plan the best trip ever! 🎒"


def compose_seed(
    fused_context: str,
    template: str = PERSONA_TEMPLATE,
    acknowledgement: Optional[str] = None,
) -> ConversationSeed:
    """
    Inject the fused context into the persona template.

    Args:
        fused_context: Output of ``fuse_context``
        template: Persona text holding exactly one ``{context}`` placeholder
        acknowledgement: Model-side reply to the persona turn

    Returns:
        (persona turn as "user", acknowledgement as "model")

    Raises:
        CompositionFailure: If the context is empty or the template is malformed
    """
    if not isinstance(fused_context, str) or not fused_context.strip():
        raise CompositionFailure("Fused context is empty")
    if template.count(CONTEXT_PLACEHOLDER) != 1:
        raise CompositionFailure(
            f"Persona template must contain exactly one {CONTEXT_PLACEHOLDER} placeholder"
        )

    persona = template.replace(CONTEXT_PLACEHOLDER, fused_context)
    return (
        Turn(role="user", text=persona),
        Turn(role="model", text=acknowledgement or ACKNOWLEDGEMENT),
    )
