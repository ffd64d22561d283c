# quiz/parsers.py
"""
Turns raw model output into validated quiz questions and flashcards.

Parsing is two-stage behind one interface: strict JSON first (the whole
string, or the outermost JSON substring carrying the records when the model
wrapped it in code fences or chatter), then a lenient line-oriented
reading. Whatever the path, every record is validated before it leaves
this module.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from core.exceptions import ParseError

logger = logging.getLogger(__name__)

EXPECTED_CHOICES = 4

NUMBERED_LINE_RE = re.compile(r'^\d+\.\s*')
CHOICE_LINE_RE = re.compile(r'^-\s*')
CORRECT_LINE_RE = re.compile(r'^[✓✅]\ufe0f?\s*')
CARD_QUESTION_RE = re.compile(r'^(س:|سؤال:)\s*')
CARD_ANSWER_RE = re.compile(r'^(ج:|جواب:|الإجابة:)\s*')

_NOT_JSON = object()


@dataclass
class ParsedQuestion:
    text: str
    choices: List[str]
    correct_answer: str

    def to_dict(self):
        return {'text': self.text, 'choices': self.choices, 'correctAnswer': self.correct_answer}


@dataclass
class ParsedFlashcard:
    question: str
    answer: str

    def to_dict(self):
        return {'question': self.question, 'answer': self.answer}


def _extract_json_substring(s: str):
    """
    Try to extract the outermost JSON object/array substring from text s and parse it.
    Returns parsed JSON or _NOT_JSON.
    """
    idx_obj = s.find('{')
    idx_arr = s.find('[')
    candidates = [i for i in (idx_obj, idx_arr) if i != -1]
    if not candidates:
        return _NOT_JSON
    start = min(candidates)

    opening = s[start]
    closing = '}' if opening == '{' else ']'
    last = s.rfind(closing)
    if last <= start:
        return _NOT_JSON

    try:
        return json.loads(s[start:last + 1])
    except ValueError:
        pass

    # Trailing chatter may contain a stray closing bracket; try the first balanced span
    depth = 0
    for i in range(start, len(s)):
        if s[i] == opening:
            depth += 1
        elif s[i] == closing:
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(s[start:i + 1])
                except ValueError:
                    return _NOT_JSON
    return _NOT_JSON


def _has_records(data, list_key: str) -> bool:
    if isinstance(data, dict):
        return isinstance(data.get(list_key), list)
    return isinstance(data, list) and bool(data) and all(isinstance(item, dict) for item in data)


def _load_json(raw: str, list_key: str):
    """
    A whole-string JSON document is taken as the answer whatever its shape.
    A fragment found inside prose only counts when it carries the records;
    otherwise it is just bracketed text and the line parser gets the input.
    """
    try:
        return json.loads(raw)
    except ValueError:
        pass
    data = _extract_json_substring(raw)
    if data is _NOT_JSON or not _has_records(data, list_key):
        return _NOT_JSON
    return data


def _first_present(item: dict, *keys):
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _clean(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _records_from_json(data, list_key: str, what: str) -> list:
    if isinstance(data, dict):
        records = data.get(list_key)
    else:
        records = data
    if not isinstance(records, list):
        raise ParseError(f"JSON response has no '{list_key}' list")

    for index, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise ParseError(f"{what} {index} is not a JSON object", position=index)
    return records


# -----------------------------
# Quiz
# -----------------------------
def _questions_from_json(data) -> List[ParsedQuestion]:
    questions = []
    for item in _records_from_json(data, 'questions', 'Question'):
        choices = _first_present(item, 'choices', 'options')
        questions.append(ParsedQuestion(
            text=_clean(_first_present(item, 'text', 'question')),
            choices=[_clean(c) for c in choices] if isinstance(choices, list) else [],
            correct_answer=_clean(_first_present(item, 'correctAnswer', 'correct_answer')),
        ))
    return questions


def _questions_from_text(raw: str) -> List[ParsedQuestion]:
    questions = []
    current = None
    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        if NUMBERED_LINE_RE.match(line):
            current = ParsedQuestion(text=NUMBERED_LINE_RE.sub('', line, count=1).strip(),
                                     choices=[], correct_answer='')
            questions.append(current)
        elif current is None:
            continue
        elif CHOICE_LINE_RE.match(line):
            current.choices.append(CHOICE_LINE_RE.sub('', line, count=1).strip())
        elif CORRECT_LINE_RE.match(line):
            current.correct_answer = CORRECT_LINE_RE.sub('', line, count=1).strip()
    return questions


def _validate_questions(questions: List[ParsedQuestion]):
    if not questions:
        raise ParseError("No questions found in model output")
    for position, question in enumerate(questions, start=1):
        if not question.text:
            raise ParseError(f"Question {position} has no text", position=position)
        if not question.choices or not all(question.choices):
            raise ParseError(f"Question {position} has no usable choices", position=position)
        if question.correct_answer not in question.choices:
            raise ParseError(f"Question {position}: correct answer {question.correct_answer!r} "
                             f"is not one of its choices", position=position)
        if len(question.choices) != EXPECTED_CHOICES:
            logger.warning(f"Question {position} has {len(question.choices)} choices, expected {EXPECTED_CHOICES}")


def parse_quiz(raw: str) -> List[ParsedQuestion]:
    raw = (raw or '').strip()
    data = _load_json(raw, 'questions')
    if data is _NOT_JSON:
        logger.info("Quiz output is not JSON, using the line-oriented parser")
        questions = _questions_from_text(raw)
    else:
        questions = _questions_from_json(data)
    _validate_questions(questions)
    return questions


# -----------------------------
# Flashcards
# -----------------------------
def _cards_from_json(data) -> List[ParsedFlashcard]:
    return [
        ParsedFlashcard(
            question=_clean(_first_present(item, 'question', 'front')),
            answer=_clean(_first_present(item, 'answer', 'back')),
        )
        for item in _records_from_json(data, 'flashcards', 'Flashcard')
    ]


def _cards_from_text(raw: str) -> List[ParsedFlashcard]:
    cards = []
    current: Optional[ParsedFlashcard] = None
    in_answer = False
    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        if NUMBERED_LINE_RE.match(line) or CARD_QUESTION_RE.match(line):
            question = CARD_QUESTION_RE.sub('', NUMBERED_LINE_RE.sub('', line, count=1), count=1)
            current = ParsedFlashcard(question=question.strip(), answer='')
            cards.append(current)
            in_answer = False
        elif CARD_ANSWER_RE.match(line):
            if current is None:
                current = ParsedFlashcard(question='', answer='')
                cards.append(current)
            current.answer = CARD_ANSWER_RE.sub('', line, count=1).strip()
            in_answer = True
        elif current is None:
            # preamble before the first card
            continue
        elif in_answer:
            current.answer = f"{current.answer} {line}".strip()
        else:
            current.question = f"{current.question} {line}".strip()
    return cards


def _validate_cards(cards: List[ParsedFlashcard]):
    if not cards:
        raise ParseError("No flashcards found in model output")
    for position, card in enumerate(cards, start=1):
        if not card.question:
            raise ParseError(f"Flashcard {position} has no question", position=position)
        if not card.answer:
            raise ParseError(f"Flashcard {position} has no answer", position=position)


def parse_flashcards(raw: str) -> List[ParsedFlashcard]:
    raw = (raw or '').strip()
    data = _load_json(raw, 'flashcards')
    if data is _NOT_JSON:
        logger.info("Flashcard output is not JSON, using the line-oriented parser")
        cards = _cards_from_text(raw)
    else:
        cards = _cards_from_json(data)
    _validate_cards(cards)
    return cards


def questions_from_records(records) -> List[ParsedQuestion]:
    """Validate already-decoded question objects (e.g. an edited quiz)."""
    questions = _questions_from_json(records)
    _validate_questions(questions)
    return questions
