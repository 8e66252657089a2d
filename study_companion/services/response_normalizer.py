"""Turns raw model text into a validated study pack."""

import json

MALFORMED_JSON = 'malformed_json'
INCOMPLETE_STRUCTURE = 'incomplete_structure'
EMPTY_FLASHCARDS = 'empty_flashcards'
EMPTY_QUIZ = 'empty_quiz'
INVALID_ITEM = 'invalid_item'

QUIZ_OPTION_COUNT = 4


class StudyPackValidationError(Exception):
    def __init__(self, kind, detail=''):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind}: {detail}" if detail else kind)


def strip_code_fences(raw_text):
    text = (raw_text or '').strip()
    if text.startswith('```json'):
        text = text[len('```json'):]
    elif text.startswith('```'):
        text = text[len('```'):]
    else:
        return raw_text
    if text.rstrip().endswith('```'):
        text = text.rstrip()[:-len('```')]
    return text.strip()


def _present(value):
    # Empty containers count as present; emptiness is reported separately.
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _clean_text(value):
    if isinstance(value, bool) or value is None:
        return ''
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return ''


def _invalid(detail):
    return StudyPackValidationError(INVALID_ITEM, detail)


def normalize_key_points(items):
    if items is None:
        return []
    if not isinstance(items, list):
        raise _invalid('summary.keyPoints must be a list')
    cleaned = []
    for index, item in enumerate(items):
        if isinstance(item, dict):
            title = _clean_text(item.get('title'))
            explanation = _clean_text(item.get('explanation'))
            text = f"{title}: {explanation}" if title and explanation else (title or explanation)
        else:
            text = _clean_text(item)
        if not text:
            raise _invalid(f'summary.keyPoints[{index}] is empty')
        cleaned.append(text)
    return cleaned


def normalize_definitions(items):
    if items is None:
        return []
    if isinstance(items, dict):
        items = [{'term': term, 'definition': definition} for term, definition in items.items()]
    if not isinstance(items, list):
        raise _invalid('summary.definitions must be a list')
    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise _invalid(f'summary.definitions[{index}] must be an object')
        term = _clean_text(item.get('term'))
        definition = _clean_text(item.get('definition'))
        if not term or not definition:
            raise _invalid(f'summary.definitions[{index}] needs term and definition')
        cleaned.append({'term': term, 'definition': definition})
    return cleaned


def normalize_string_list(items, field_name):
    if items is None:
        return []
    if not isinstance(items, list):
        raise _invalid(f'summary.{field_name} must be a list')
    cleaned = []
    for index, item in enumerate(items):
        text = _clean_text(item)
        if not text:
            raise _invalid(f'summary.{field_name}[{index}] is empty')
        cleaned.append(text)
    return cleaned


def normalize_summary(summary):
    if not isinstance(summary, dict):
        raise _invalid('summary must be an object')
    overview = _clean_text(summary.get('overview'))
    if not overview:
        raise _invalid('summary.overview is empty')
    return {
        'overview': overview,
        'keyPoints': normalize_key_points(summary.get('keyPoints')),
        'definitions': normalize_definitions(summary.get('definitions')),
        'importantConcepts': normalize_string_list(summary.get('importantConcepts'), 'importantConcepts'),
    }


def normalize_flashcards(items):
    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise _invalid(f'flashcards[{index}] must be an object')
        question = _clean_text(item.get('question', item.get('front')))
        answer = _clean_text(item.get('answer', item.get('back')))
        if not question or not answer:
            raise _invalid(f'flashcards[{index}] needs question and answer')
        cleaned.append({'question': question, 'answer': answer})
    return cleaned


def resolve_correct_index(item, options):
    correct = item.get('correct')
    if isinstance(correct, int) and not isinstance(correct, bool):
        return correct
    if isinstance(correct, str) and correct.strip().isdigit():
        return int(correct.strip())
    answer = _clean_text(item.get('answer'))
    if correct is None and answer in options:
        return options.index(answer)
    return None


def normalize_quiz(items):
    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise _invalid(f'quiz[{index}] must be an object')
        question = _clean_text(item.get('question'))
        if not question:
            raise _invalid(f'quiz[{index}] has no question')
        raw_options = item.get('options')
        if not isinstance(raw_options, list) or len(raw_options) != QUIZ_OPTION_COUNT:
            raise _invalid(f'quiz[{index}] must have exactly {QUIZ_OPTION_COUNT} options')
        options = [_clean_text(option) for option in raw_options]
        if any(not option for option in options) or len(set(options)) != QUIZ_OPTION_COUNT:
            raise _invalid(f'quiz[{index}] options must be distinct and non-empty')
        correct = resolve_correct_index(item, options)
        if correct is None or not 0 <= correct < QUIZ_OPTION_COUNT:
            raise _invalid(f'quiz[{index}] has no valid correct option index')
        explanation = item.get('explanation', '')
        if explanation is not None and not isinstance(explanation, str):
            raise _invalid(f'quiz[{index}] explanation must be text')
        cleaned.append({
            'question': question,
            'options': options,
            'correct': correct,
            'explanation': (explanation or '').strip(),
        })
    return cleaned


def normalize(raw_text):
    text = strip_code_fences(raw_text)
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise StudyPackValidationError(MALFORMED_JSON, str(exc)[:200]) from exc
    if not isinstance(parsed, dict):
        raise StudyPackValidationError(INCOMPLETE_STRUCTURE, 'top-level value is not an object')

    missing = [field for field in ('summary', 'flashcards', 'quiz') if not _present(parsed.get(field))]
    if missing:
        raise StudyPackValidationError(INCOMPLETE_STRUCTURE, f"missing {', '.join(missing)}")

    flashcards = parsed['flashcards']
    if not isinstance(flashcards, list) or not flashcards:
        raise StudyPackValidationError(EMPTY_FLASHCARDS)
    quiz = parsed['quiz']
    if not isinstance(quiz, list) or not quiz:
        raise StudyPackValidationError(EMPTY_QUIZ)

    return {
        'summary': normalize_summary(parsed['summary']),
        'flashcards': normalize_flashcards(flashcards),
        'quiz': normalize_quiz(quiz),
    }
