"""System prompt and conversation formatting for the subject assistant."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from azhari_platform.teachers.categories import grade_label, section_label, stage_label

PRIMER_REPLY = "فهمت! أنا جاهز لمساعدة الطلاب في هذه المادة. كيف يمكنني مساعدتك؟"

_TASKS = """مهمتك:
- مساعدة الطلاب في فهم المادة والإجابة على أسئلتهم
- شرح المفاهيم بطريقة سهلة ومبسطة
- تقديم أمثلة توضيحية عند الحاجة
- التشجيع والتحفيز للطلاب
- الرد باللغة العربية الفصحى
- إذا كان السؤال خارج نطاق المادة، وجه الطالب بلطف للسؤال المناسب

أسلوبك:
- ودود ومشجع
- واضح ومباشر
- استخدم الأمثلة والتشبيهات
- قسم الإجابات الطويلة لنقاط
- استخدم الرموز التعبيرية باعتدال 📚✨"""


@dataclass
class ChatMessage:
    role: str
    content: str


@dataclass
class PromptContext:
    subject_name: str
    stage: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    instructions: List[str] = field(default_factory=list)
    source_names: List[str] = field(default_factory=list)


def build_system_prompt(context: PromptContext) -> str:
    lines = [
        'أنت مساعد تعليمي ذكي لمنصة "أزهاريون" التعليمية الأزهرية.',
        f"المادة الحالية: {context.subject_name}",
    ]
    if context.stage:
        lines.append(f"المرحلة: {stage_label(context.stage)}")
    if context.grade:
        lines.append(f"الصف: {grade_label(context.grade)}")
    if context.section:
        lines.append(f"الشعبة: {section_label(context.section)}")

    prompt = "\n".join(lines) + "\n\n" + _TASKS

    if context.instructions:
        prompt += "\n\nتعليمات إضافية من إدارة المنصة:\n"
        prompt += "\n".join(f"- {text}" for text in context.instructions)

    if context.source_names:
        prompt += "\n\nالمراجع المتاحة لهذه المادة:\n"
        prompt += "\n".join(f"- {name}" for name in context.source_names)

    return prompt


def build_contents(system_prompt: str, messages: Sequence[ChatMessage], history_limit: int) -> List[Dict]:
    """
    Gemini ``contents``: the system prompt as a user turn, a primer model
    reply, then the last ``history_limit`` chat messages.
    """
    recent = list(messages)[-history_limit:] if history_limit > 0 else []
    contents = [
        {"role": "user", "parts": [{"text": system_prompt}]},
        {"role": "model", "parts": [{"text": PRIMER_REPLY}]},
    ]
    for message in recent:
        contents.append({
            "role": "user" if message.role == "user" else "model",
            "parts": [{"text": message.content}],
        })
    return contents
