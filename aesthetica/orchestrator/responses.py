"""Patient-facing reply texts (Spanish).

Deterministic replies are assembled here so that the layers only decide
*which* reply applies.
"""
from __future__ import annotations

from typing import Optional, Sequence

CLOSING = (
    "Esta información es orientativa y no sustituye una valoración médica presencial u online. "
    "No debe usarse para diagnóstico, prescripción ni decisiones de tratamiento sin consultar "
    "a un profesional de la salud."
)

INTERNAL_ERROR_REPLY = (
    "Ha ocurrido un problema al procesar tu mensaje. Intenta de nuevo en unos minutos o revisa "
    "tu conexión. Si tienes síntomas que te preocupan, prioriza contactar directamente a tu "
    "médico o a un servicio de urgencias."
)

EMPTY_MESSAGE_ERROR = "Mensaje vacío"


def closing_suffix(quick: bool) -> str:
    """Legal closing appended to non-emergency replies; omitted in quick mode."""
    return "" if quick else f"\n\n{CLOSING}"


# ── Domain gate ─────────────────────────────────────────────────────


def offtopic_in_esthetic_session(bot_name: str, quick: bool) -> str:
    return (
        "Parece que este mensaje es de otro tema (legal, programación, finanzas u otro ámbito "
        "diferente a la medicina estética). "
        f"{bot_name} está centrado exclusivamente en tratamientos estéticos, así que en esta "
        "parte no puedo asesorarte bien.\n\n"
        "Si quieres, seguimos con tus dudas sobre rellenos, toxina botulínica, láser, manchas, "
        "acné, cicatrices, ojeras, flacidez u otros procedimientos estéticos."
        + closing_suffix(quick)
    )


def out_of_scope(bot_name: str, quick: bool) -> str:
    return (
        f"Soy {bot_name} y estoy diseñada exclusivamente para resolver dudas de medicina estética "
        "(por ejemplo: rellenos, toxina botulínica, láser, manchas, acné, cicatrices, ojeras, "
        "flacidez, etc.). Tu mensaje parece ser de otro tema (legal, programación, finanzas u "
        "otro ámbito), así que en este caso no puedo darte una respuesta detallada.\n\n"
        "Si quieres, cuéntame qué zona o qué tipo de tratamiento estético tienes en mente y lo vemos."
        + closing_suffix(quick)
    )


def please_specify(quick: bool) -> str:
    return (
        "Para poder ayudarte necesito que tu pregunta esté claramente relacionada con medicina "
        "estética. Por ejemplo, puedes decirme si te interesa hablar de rellenos, toxina "
        "botulínica, láser para manchas o depilación, cicatrices de acné, ojeras, flacidez, etc., "
        "y en qué zona del cuerpo te preocupa más."
        + closing_suffix(quick)
    )


# ── Emergencies and triage ──────────────────────────────────────────


def detected_signals_line(signals: Sequence[str]) -> str:
    if len(signals) == 1:
        return f"Detecté una señal de alarma: **{signals[0]}**."
    return f"Detecté señales de alarma (prioridad alta → baja): **{', '.join(signals)}**."


def danger_signal_emergency(bot_name: str, signals: Sequence[str], emergency_line: str) -> str:
    return (
        detected_signals_line(signals)
        + "\n\n"
        "Si esto te está ocurriendo ahora (especialmente después de una inyección o procedimiento "
        "facial), es importante **buscar valoración médica urgente de inmediato**. "
        f"{bot_name} no puede valorar ni manejar urgencias en tiempo real. "
        "Acude a **urgencias** o contacta al médico que realizó el procedimiento **ya**."
        f"\n\n{emergency_line}\n\n{CLOSING}"
    )


def complication_emergency(bot_name: str, guidance: str, emergency_line: str) -> str:
    return (
        f"{guidance}\n\n"
        f"{bot_name} no puede valorar ni manejar urgencias ni complicaciones en tiempo real. "
        "Debes acudir de inmediato al servicio de urgencias más cercano o contactar al médico "
        f"que realizó el procedimiento. {emergency_line}\n\n{CLOSING}"
    )


def complication_mild(guidance: str, quick: bool) -> str:
    return (
        f"{guidance}\n\n"
        "Aunque algunas reacciones leves pueden ser esperables, siempre es recomendable comentar "
        "cualquier cambio con tu médico tratante, sobre todo si algo te preocupa o cambia de forma brusca."
        + closing_suffix(quick)
    )


def complication_prompt_review(guidance: str, quick: bool) -> str:
    return (
        f"{guidance}\n\n"
        "Por el tipo de síntomas que describes, lo más prudente es que un médico con experiencia "
        "en medicina estética te valore directamente. Si eres paciente de tu clínica de confianza, "
        "te recomiendo contactarles para una revisión prioritaria."
        + closing_suffix(quick)
    )


# ── Definitions ─────────────────────────────────────────────────────


def definition_safety_footnote(signals: Sequence[str]) -> str:
    if len(signals) == 1:
        return (
            f"⚠️ Nota de seguridad: mencionaste **{signals[0]}**. Si esto le está ocurriendo a "
            "alguien (sobre todo tras un procedimiento/inyección), conviene valoración médica inmediata."
        )
    return (
        f"⚠️ Nota de seguridad: mencionaste señales como **{', '.join(signals)}**. Si le está "
        "ocurriendo a alguien (especialmente tras un procedimiento/inyección), conviene valoración "
        "médica inmediata."
    )


def definition(
    term: str,
    text: str,
    *,
    carried_signals: Sequence[str] = (),
    safety_note: Optional[str] = None,
    quick: bool = False,
) -> str:
    notes = []
    if carried_signals:
        notes.append(definition_safety_footnote(carried_signals))
    if safety_note:
        notes.append(f"⚠️ {safety_note}")
    body = f"**Definición — {term}:**\n{text}"
    if notes:
        body += "\n\n" + "\n\n".join(notes)
    return body + closing_suffix(quick)


# ── Materials ───────────────────────────────────────────────────────


def high_risk_material_emergency(signals: Sequence[str], emergency_line: str) -> str:
    return (
        detected_signals_line(signals)
        + "\n\n"
        "Si te aplicaron un material de alto riesgo/no autorizado (por ejemplo "
        "“biopolímeros/silicona/modelantes/aceites”) y además hay señales de alarma, lo más "
        "prudente es **acudir a urgencias de inmediato** o contactar al médico tratante **ya**."
        f"\n\n{emergency_line}\n\n{CLOSING}"
    )


def high_risk_material_considering(description: str, quick: bool) -> str:
    return (
        f"{description}\n\n"
        "Si te lo están ofreciendo o estás considerando aplicártelo: **no es recomendable**. "
        "En general, los rellenos permanentes/no autorizados (p. ej., “modelantes”, “silicona”, "
        "“aceites”, “biopolímeros”) se asocian con complicaciones difíciles de manejar y a veces "
        "irreversibles.\n\n"
        "Si buscas un relleno, lo más seguro es hablar con un médico especialista y preguntar por "
        "materiales **autorizados, trazables y reabsorbibles** cuando corresponda.\n\n"
        "Si quieres, dime: **zona**, **objetivo** y **si te lo ofrecieron en clínica médica** o no, "
        "y te ayudo a formular preguntas de seguridad para tu consulta."
        + closing_suffix(quick)
    )


def high_risk_material_already(description: str, quick: bool) -> str:
    return (
        f"{description}\n\n"
        "Si ya te aplicaron algo de este tipo o sospechas que fue un “relleno permanente/modelante”: "
        "lo más prudente es **no manipular la zona** y buscar valoración con un médico con "
        "experiencia en complicaciones de rellenos.\n\n"
        "Si presentas dolor intenso, cambios de color, piel fría, inflamación que progresa rápido, "
        "fiebre, secreción, dificultad para respirar o alteraciones visuales, busca atención inmediata.\n\n"
        "Si me dices: **cuándo fue**, **en qué zona**, y **qué síntomas (si hay)**, puedo "
        "orientarte con información general sobre qué suele valorar un especialista."
        + closing_suffix(quick)
    )


# ── Brain fallbacks ─────────────────────────────────────────────────


def brain_unavailable(quick: bool) -> str:
    return (
        "En este momento no tengo habilitada la conexión al “cerebro IA” (falta la clave del "
        "proveedor). Puedo seguir respondiendo con la lógica determinística, pero para preguntas "
        "complejas necesito esa integración."
        + closing_suffix(quick)
    )


def brain_needs_context(quick: bool) -> str:
    return (
        "Puedo ayudarte con esa duda, pero necesito un poco más de contexto. ¿Puedes decirme en "
        "qué zona sería el tratamiento, cuál es tu objetivo y si ya te aplicaron algo antes?"
        + closing_suffix(quick)
    )


def brain_retry(quick: bool) -> str:
    return (
        "Tuve un problema al consultar el “cerebro IA”. Intentemos de nuevo. Si quieres, pega tu "
        "pregunta con: zona, objetivo y si ya hubo algún procedimiento previo."
        + closing_suffix(quick)
    )


def brain_answer(text: str, quick: bool) -> str:
    return text + closing_suffix(quick)


# ── General ─────────────────────────────────────────────────────────


def general_thanks(bot_name: str, quick: bool) -> str:
    return (
        f"Gracias a ti por confiar en {bot_name} 💜. Siempre que tengas dudas sobre tratamientos "
        "estéticos, puedo ayudarte a entender mejor los conceptos y los posibles riesgos, pero "
        "recuerda que la decisión final y la valoración detallada siempre deben hacerse con tu médico."
        + closing_suffix(quick)
    )


def general_orientation(quick: bool) -> str:
    return (
        "En medicina estética es muy importante equilibrar expectativas, seguridad y evidencia "
        "científica. Puedo ayudarte a entender conceptos generales y a identificar señales de "
        "alerta que requieren valoración médica. Si puedes contarme un poco más de qué tratamiento "
        "o zona quieres hablar, podré orientarte de forma más específica (siempre a nivel informativo)."
        + closing_suffix(quick)
    )
