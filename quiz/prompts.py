# quiz/prompts.py
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ARTIFACT_TYPES = ('quiz', 'summary', 'flashcards')
DIFFICULTIES = ('easy', 'medium', 'hard')
DEFAULT_DIFFICULTY = 'medium'

DIFFICULTY_LABELS = {
    'easy': 'سهل',
    'medium': 'متوسط',
    'hard': 'صعب',
}

DIFFICULTY_GUIDANCE = {
    'easy': 'أسئلة فهم أساسية',
    'medium': 'أسئلة متوسطة التعقيد',
    'hard': 'أسئلة تتطلب فهماً عميقاً',
}


@dataclass(frozen=True)
class Prompt:
    system_message: str
    user_message: str
    max_tokens: int
    temperature: float


def quiz_title(difficulty: str) -> str:
    return f"اختبار {DIFFICULTY_LABELS.get(difficulty, DIFFICULTY_LABELS[DEFAULT_DIFFICULTY])}"


def validate_difficulty(difficulty: Optional[str]) -> str:
    if difficulty in (None, ''):
        return DEFAULT_DIFFICULTY
    if difficulty not in DIFFICULTIES:
        raise ValidationError('مستوى الصعوبة غير صالح')
    return difficulty


def _truncate(content: str) -> str:
    limit = settings.MAX_PROMPT_CHARS
    if len(content) > limit:
        logger.info(f"Truncating prompt content from {len(content)} to {limit} chars")
        return content[:limit]
    return content


def _quiz_prompt(content: str, difficulty: str) -> Prompt:
    count = settings.QUESTIONS_PER_DIFFICULTY[difficulty]
    system_message = f"""أنت مساعد ذكي متخصص في إنشاء اختبارات تعليمية باللغة العربية. قم بإنشاء اختبار بناءً على المحتوى المقدم.
اتبع هذه القواعد:
1. يجب أن تكون الأسئلة مستمدة حصراً من المحتوى المقدم
2. مستوى الصعوبة {DIFFICULTY_LABELS[difficulty]}: {count} {DIFFICULTY_GUIDANCE[difficulty]}
3. كل سؤال يجب أن يحتوي على 4 خيارات وإجابة صحيحة واحدة مطابقة حرفياً لأحد الخيارات
4. قم بتنسيق الإجابة كـ JSON فقط بهذا الشكل دون أي نص إضافي:
{{
  "questions": [
    {{
      "text": "نص السؤال",
      "choices": ["الخيار الأول", "الخيار الثاني", "الخيار الثالث", "الخيار الرابع"],
      "correctAnswer": "الإجابة الصحيحة"
    }}
  ]
}}"""
    user_message = f"قم بإنشاء اختبار بمستوى {DIFFICULTY_LABELS[difficulty]} باللغة العربية من هذا المحتوى:\n{content}"
    return Prompt(system_message, user_message, max_tokens=2000, temperature=0.7)


def _summary_prompt(content: str) -> Prompt:
    system_message = ("أنت مساعد ذكي يكتب ملخصات موجزة ودقيقة باللغة العربية. "
                      "لخص المحتوى المقدم في فقرات نثرية واضحة دون إضافة معلومات من خارجه.")
    user_message = f"اكتب ملخصاً باللغة العربية لهذا المحتوى:\n{content}"
    return Prompt(system_message, user_message, max_tokens=1000, temperature=0.5)


def _flashcards_prompt(content: str) -> Prompt:
    system_message = """أنت مساعد ذكي ينشئ بطاقات تعليمية باللغة العربية. أنشئ من 5 إلى 10 بطاقات تغطي المفاهيم الأساسية في المحتوى المقدم، لكل بطاقة سؤال وجواب.
قم بتنسيق الإجابة كـ JSON فقط بهذا الشكل دون أي نص إضافي:
{
  "flashcards": [
    {"question": "السؤال", "answer": "الجواب"}
  ]
}"""
    user_message = f"أنشئ بطاقات تعليمية باللغة العربية عن هذا المحتوى:\n{content}"
    return Prompt(system_message, user_message, max_tokens=1500, temperature=0.7)


def build_prompt(artifact_type: str, content: str, difficulty: Optional[str] = None) -> Prompt:
    """
    Build the system/user messages for one artifact type.

    Every prompt asks for strict JSON; the parser still tolerates the
    line-oriented format when a model ignores that.
    """
    if artifact_type not in ARTIFACT_TYPES:
        raise ValidationError('نوع العملية غير صالح')
    content = _truncate(content or '')

    if artifact_type == 'quiz':
        return _quiz_prompt(content, validate_difficulty(difficulty))
    if artifact_type == 'summary':
        return _summary_prompt(content)
    return _flashcards_prompt(content)
