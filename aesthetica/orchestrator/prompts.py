"""System prompt and deterministic context pack for the generative fallback."""
from __future__ import annotations

from typing import List, Optional

from aesthetica.clients.llm import LLMMessage
from aesthetica.orchestrator.facts import MessageFacts
from aesthetica.orchestrator.types import RouteDecision, UserProfile

_QUICK_NOTE = (
    "Estás en modo consulta rápida: mantén la respuesta relativamente breve (aprox. 150–230 "
    "palabras), con párrafos cortos y aire entre ideas. No repitas avisos legales largos (el "
    "sistema los añade aparte)."
)

_RESPONSE_INSTRUCTIONS = (
    "INSTRUCCIONES DE RESPUESTA:\n"
    "- Respuesta informativa (no diagnóstico).\n"
    "- No des técnica de inyección, puntos, dosis, ni instrucciones operativas.\n"
    "- Si hay riesgos, explícalos y menciona señales de alarma.\n"
    "- Si faltan datos, pide 1–3 preguntas.\n"
)


def build_system_prompt(bot_name: str, *, quick: bool = False) -> str:
    prompt = (
        f"Eres {bot_name}, un asistente informativo de medicina estética en español. "
        "Prioridad absoluta: seguridad del usuario. NO diagnostiques. NO prescribas. "
        "NO des instrucciones peligrosas u operativas de procedimientos (puntos, dosis, técnica "
        "de inyección, cómo aplicarlo). "
        "Si el usuario describe señales de alarma (alteraciones visuales, dificultad para "
        "respirar/dolor u opresión en el pecho, necrosis, piel fría con cambio de color, dolor "
        "intenso desproporcionado, fiebre con pus, desmayo), indica valoración médica "
        "urgente/urgencias y que contacte a su médico tratante. "
        "Tono: humano, amigable, calmado y no alarmista; explica de forma sencilla, con frases "
        "cortas y ejemplos fáciles de entender. Escribe como si conversaras con la persona, no "
        "como un informe académico. "
        "Estructura tu respuesta de manera natural, sin numerar secciones ni usar encabezados "
        "como \"1)\", \"2)\" o \"Resumen:\". "
        "Usa párrafos cortos y deja una línea en blanco entre bloques importantes. Cuando tenga "
        "sentido, usa listas con guiones \"-\" para enumerar riesgos o puntos clave. "
        "Al responder a dudas sobre un tratamiento o síntoma: empieza con una idea-resumen en una "
        "o dos frases; después ofrece una explicación simple; luego comenta los riesgos y lo "
        "importante a vigilar; si aplica, menciona las señales de alarma y qué hacer; y termina, "
        "si faltan datos clave, con 1–3 preguntas concretas y cercanas. "
        "Evita respuestas excesivamente largas y no recargues de advertencias si ya explicaste "
        "los riesgos una vez."
    )
    if quick:
        prompt += " " + _QUICK_NOTE
    return prompt


def _flag(value: object) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_context_pack(
    facts: MessageFacts,
    route: RouteDecision,
    profile: Optional[UserProfile],
    *,
    likely_term: Optional[str] = None,
) -> str:
    """Plain-text summary of the deterministic signals for the model."""
    lines = [f"Router: route={route.route.value}, reason={route.reason.value}"]

    if profile is not None:
        lines.append(
            f"Perfil: name={_flag(profile.name)}, ageRange={_flag(profile.age_range)}, "
            f"country={_flag(profile.country)}, area={_flag(profile.area)}, "
            f"isPregnant={_flag(profile.is_pregnant)}"
        )
    else:
        lines.append("Perfil: null (modo quick o sin perfil)")

    if facts.materials:
        described = " | ".join(
            f"id={m.id}, nombre={m.name}, categoria={m.category.value}, "
            f"riesgo={m.risk_level}, listaNegra={_flag(m.blacklisted)}"
            for m in facts.materials
        )
        high_risk = facts.high_risk_material.id if facts.high_risk_material else "none"
        lines.append(
            f"Materiales detectados: {described}, highRisk={high_risk}, "
            f"contexto={facts.material_context.value}"
        )
    else:
        lines.append("Materiales detectados: null")

    if facts.danger_signals:
        lines.append(
            "Señales de alarma detectadas (no necesariamente urgencia): "
            + ", ".join(facts.danger_signals)
        )
    else:
        lines.append("Señales de alarma detectadas: none")

    lines.append(f"Contexto post-procedimiento: likely={_flag(facts.procedure.likely_post_procedure)}")
    lines.append(f"Intención de definición: {_flag(facts.definition_intent)}")
    if likely_term:
        lines.append(f"Término probable a definir (sin entrada en la base): {likely_term}")
    return "\n".join(lines)


def build_brain_messages(
    user_message: str,
    context_pack: str,
    *,
    bot_name: str,
    quick: bool = False,
) -> List[LLMMessage]:
    system = (
        build_system_prompt(bot_name, quick=quick)
        + "\n\n"
        "CONTEXTO DETERMINÍSTICO (para tu referencia; úsalo si ayuda, pero responde a la "
        "pregunta concreta):\n"
        + context_pack
        + "\n\n"
        + _RESPONSE_INSTRUCTIONS
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user_message},
    ]
