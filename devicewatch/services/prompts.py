"""
Prompt templates for the text-generation service

Templates are rendered in a single ``string.Template`` pass, so substituted
values that happen to contain ``$placeholders`` are left as-is.
"""

import json
from dataclasses import dataclass, field
from string import Template
from typing import Any, List, Sequence

DEFAULT_LANGUAGE = "en"

LANGUAGE_NAMES = {
    "am": "Amharic",
}

RISK = Template("""
Analyze the following recent sensor readings from an industrial device.
The readings include:
- Voltage (volts)
- PIR Motion (boolean)
- Vibration (boolean)
- Gas Detected (boolean)
- Temperature (Celsius)

Readings: $readings
Determine the risk level (LOW, MEDIUM, HIGH), a confidence score (0.0 to 1.0), and a brief reason.
Return ONLY a JSON object with keys: "risk_level", "confidence", "reason".
""")

EXPLANATION = Template("""
Based on the following recent sensor readings for device $device_id, provide a short, non-technical, human-readable explanation of the device's current condition.
The readings include Voltage, PIR Motion, Vibration, Gas, and Temperature.
Readings: $readings
Return ONLY a JSON object with key: "explanation".
""")

MAINTENANCE = Template("""
Analyze the following history of warnings and danger states for device $device_id.
History: $readings
Determine if maintenance is required and suggest an action.
Return ONLY a JSON object with keys: "maintenance_required" (boolean), "suggested_action" (string).
""")

SUMMARY = Template("""
Here is the latest status of all devices in the system:
$system_data
Generate a concise system-wide safety overview.
Return ONLY a JSON object with keys: "overall_status" (string, e.g., "SAFE", "ATTENTION REQUIRED"), "devices_at_risk" (number), "summary" (string).
""")

CHAT = Template("""
You are an intelligent industrial IoT assistant for device $device_id.
Here is the recent sensor history for the device:
$readings

The user asks: "$query"

Answer the user's question based on the data provided.
If the user asks about the status, summarize the recent readings.
If the user asks for advice, provide technical recommendations based on the sensor values (Voltage, Temp, Gas, Vibration).
Keep the answer concise (under 50 words) and helpful.
""")


@dataclass
class PromptContext:
    device_id: str = ""
    readings: Sequence[Any] = field(default_factory=list)
    query: str = ""
    system_data: Sequence[Any] = field(default_factory=list)


def _serialize(items: Sequence[Any]) -> str:
    return json.dumps([item.to_dict() if hasattr(item, "to_dict") else item for item in items])


def language_hint(lang: str, fields: List[str]) -> str:
    """Instruction asking for ``fields`` in the requested language, or '' for English"""
    if not lang or lang == DEFAULT_LANGUAGE:
        return ""
    names = " and ".join(f"'{name}'" for name in fields)
    return f" Provide the {names} in {LANGUAGE_NAMES.get(lang, lang)} language."


def build_prompt(template: Template, context: PromptContext, lang: str = DEFAULT_LANGUAGE, localized_fields=()) -> str:
    prompt = template.substitute(
        device_id=context.device_id,
        readings=_serialize(context.readings),
        query=context.query,
        system_data=_serialize(context.system_data),
    )
    return prompt + language_hint(lang, list(localized_fields))
