# utils/topics.py
"""Curated topics for the random-topic action."""

from __future__ import annotations

import random

PREDEFINED_WORDS = [
    "Balance", "Harmony", "Discord", "Unity", "Fragmentation", "Clarity",
    "Ambiguity", "Presence", "Absence", "Creation", "Destruction", "Light",
    "Shadow", "Beginning", "Ending", "Rising", "Falling", "Connection",
    "Isolation", "Hope", "Despair",
    "Order and chaos", "Light and shadow", "Sound and silence",
    "Form and formlessness", "Being and nonbeing", "Presence and absence",
    "Motion and stillness", "Unity and multiplicity", "Finite and infinite",
    "Sacred and profane", "Memory and forgetting", "Question and answer",
    "Search and discovery", "Journey and destination", "Dream and reality",
    "Time and eternity", "Self and other", "Known and unknown",
    "Spoken and unspoken", "Visible and invisible",
    "Zigzag", "Waves", "Spiral", "Bounce", "Slant", "Drip", "Stretch",
    "Squeeze", "Float", "Fall", "Spin", "Melt", "Rise", "Twist", "Explode",
    "Stack", "Mirror", "Echo", "Vibrate",
    "Gravity", "Friction", "Momentum", "Inertia", "Turbulence", "Pressure",
    "Tension", "Oscillate", "Fractal", "Quantum", "Entropy", "Vortex",
    "Resonance", "Equilibrium", "Centrifuge", "Elastic", "Viscous", "Refract",
    "Diffuse", "Cascade", "Levitate", "Magnetize", "Polarize", "Accelerate",
    "Compress", "Undulate",
    "Liminal", "Ephemeral", "Paradox", "Zeitgeist", "Metamorphosis",
    "Synesthesia", "Recursion", "Emergence", "Dialectic", "Apophenia", "Limbo",
    "Flux", "Sublime", "Uncanny", "Palimpsest", "Chimera", "Void", "Transcend",
    "Ineffable", "Qualia", "Gestalt", "Simulacra", "Abyssal",
    "Existential", "Nihilism", "Solipsism", "Phenomenology", "Hermeneutics",
    "Deconstruction", "Postmodern", "Absurdism", "Catharsis", "Epiphany",
    "Melancholy", "Nostalgia", "Longing", "Reverie", "Pathos", "Ethos", "Logos",
    "Mythos", "Anamnesis", "Intertextuality", "Metafiction", "Stream", "Lacuna",
    "Caesura", "Enjambment",
]

UNIQUE_WORDS = list(dict.fromkeys(PREDEFINED_WORDS))


def pick_random_topic(current: str | None = None, rng: random.Random | None = None) -> str:
    """Random curated topic, never the current one (case-insensitive)."""
    rng = rng or random.Random()
    index = rng.randrange(len(UNIQUE_WORDS))
    word = UNIQUE_WORDS[index]
    if current and word.lower() == current.strip().lower():
        word = UNIQUE_WORDS[(index + 1) % len(UNIQUE_WORDS)]
    return word
