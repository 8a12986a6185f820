"""
Quiz generation service
Builds prompts, parses and repairs generator output, produces hints
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from fastapi import Depends

from elearning.config import settings
from elearning.services.gemini_service import GeminiService, get_gemini_service

logger = logging.getLogger(__name__)

PROGRAMMING_TOPICS = [
    "javascript", "python", "java", "c#", "c++", "php", "ruby", "swift", "kotlin", "rust",
    "golang", "typescript", "react", "angular", "vue", "node.js", "express", "django", "flask",
    "spring", "html", "css", "sass", "less", "sql", "mongodb", "postgresql", "mysql",
    "database", "data structure", "algorithm", "programming", "software", "development",
    "web development", "mobile development", "frontend", "backend", "full stack",
    "devops", "git", "docker", "kubernetes", "aws", "azure", "cloud computing",
    "machine learning", "artificial intelligence", "deep learning", "cybersecurity",
    "networking", "api", "testing", "debugging", "design patterns", "object-oriented",
    "functional programming", "agile", "scrum", "code", "coding", "compiler", "interpreter",
    "framework", "library", "package", "module", "component", "rest api", "graphql",
    "microservices", "architecture", "operating system", "linux", "unix", "windows",
    "embedded systems", "blockchain", "game development", "unity", "unreal engine",
]

VALID_DIFFICULTIES = ("easy", "medium", "hard", "expert")
DEFAULT_DIFFICULTY = "medium"

OPTION_LABELS = ("A", "B", "C", "D")
PLACEHOLDER_OPTIONS = {label: f"Option {label}" for label in OPTION_LABELS}
REQUIRED_FIELDS = ("question", "options", "correctAnswer", "explanation")

# First '[' ... last ']' that wraps at least one object
QUIZ_ARRAY_PATTERN = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")

NON_PROGRAMMING_TOPIC_MESSAGE = "Sorry, quizzes can only be generated for programming-related topics."

FALLBACK_FUN_FACTS = {
    "questions": [
        {
            "question": "Hewan apa yang memiliki tiga jantung?",
            "choices": ["Gurita", "Hiu", "Lumba-lumba", "Penyu"],
            "correctAnswer": 0
        },
        {
            "question": "Planet manakah yang memiliki hari lebih panjang daripada tahunnya?",
            "choices": ["Mars", "Venus", "Jupiter", "Merkurius"],
            "correctAnswer": 1
        },
        {
            "question": "Makanan apa yang tidak pernah basi jika disimpan dengan benar?",
            "choices": ["Roti", "Keju", "Madu", "Susu"],
            "correctAnswer": 2
        },
        {
            "question": "Berapa jumlah tulang pada tubuh manusia dewasa?",
            "choices": ["186", "206", "226", "256"],
            "correctAnswer": 1
        },
        {
            "question": "Negara manakah yang memiliki jumlah pulau terbanyak di dunia?",
            "choices": ["Indonesia", "Filipina", "Swedia", "Norwegia"],
            "correctAnswer": 2
        },
        {
            "question": "Hewan darat tercepat di dunia adalah?",
            "choices": ["Singa", "Cheetah", "Kuda", "Rusa"],
            "correctAnswer": 1
        },
        {
            "question": "Berapa lama cahaya matahari mencapai Bumi?",
            "choices": ["Sekitar 8 detik", "Sekitar 8 menit", "Sekitar 8 jam", "Sekitar 8 hari"],
            "correctAnswer": 1
        },
        {
            "question": "Organ tubuh manusia manakah yang paling besar?",
            "choices": ["Hati", "Paru-paru", "Kulit", "Otak"],
            "correctAnswer": 2
        },
        {
            "question": "Hewan apa yang tidur sambil berdiri?",
            "choices": ["Kucing", "Kuda", "Anjing", "Kelinci"],
            "correctAnswer": 1
        },
        {
            "question": "Pohon tertinggi di dunia termasuk jenis apa?",
            "choices": ["Redwood", "Beringin", "Jati", "Mahoni"],
            "correctAnswer": 0
        },
    ]
}


class QuizFormatError(ValueError):
    """Generator output could not be turned into a list of questions"""


def is_programming_topic(topic: str) -> bool:
    """Substring match in either direction against the allow-list"""
    lowered = topic.lower()
    return any(term in lowered or lowered in term for term in PROGRAMMING_TOPICS)


def normalize_difficulty(difficulty: Optional[str]) -> str:
    if isinstance(difficulty, str) and difficulty.lower() in VALID_DIFFICULTIES:
        return difficulty.lower()
    return DEFAULT_DIFFICULTY


def normalize_question_count(count: Any) -> int:
    """Default when missing or unusable, capped at MAX_QUIZ_QUESTIONS"""
    try:
        value = int(count)
    except (TypeError, ValueError):
        return settings.DEFAULT_QUIZ_QUESTIONS

    if value < 1:
        return settings.DEFAULT_QUIZ_QUESTIONS
    return min(value, settings.MAX_QUIZ_QUESTIONS)


def build_quiz_prompt(topic: str, difficulty: str, count: int) -> str:
    return f"""Create a {difficulty} difficulty quiz with {count} multiple-choice questions about {topic}.
For each question, provide 4 options (labeled A, B, C, D) and indicate the correct answer.
Format your response as a valid JSON array with this structure:
[
  {{
    "question": "Question text here?",
    "options": {{
      "A": "First option",
      "B": "Second option",
      "C": "Third option",
      "D": "Fourth option"
    }},
    "correctAnswer": "A",
    "explanation": "Brief explanation why this is the correct answer"
  }}
]
Make sure the response is valid JSON with no additional text before or after."""


def build_hint_prompt(question: Dict[str, Any]) -> str:
    options = question.get("options") or {}
    correct = question.get("correctAnswer")
    option_lines = "\n".join(f"{label}: {options.get(label)}" for label in OPTION_LABELS)

    return f"""I need a hint for this question without revealing the answer directly:
Question: {question.get("question")}
Options:
{option_lines}

The correct answer is {correct}: {options.get(correct)}.

Please provide a subtle hint that guides the user towards the correct answer without explicitly stating it.
The hint should be one or two sentences maximum."""


KABOOM_PROMPT = """Generate 10 multiple-choice questions about random fun facts in this world in Bahasa Indonesia.
For each question, provide 4 options and indicate the index (0-based) of the correct answer.
Format the response as a JSON object with this exact structure:
{
  "questions": [
    { "question": "question text in Bahasa Indonesia", "choices": ["option1", "option2", "option3", "option4"], "correctAnswer": correctAnswerIndex },
    ...
  ]
}
Only return the JSON, nothing else. Make sure all questions, options, and explanations are written in Bahasa Indonesia."""


def parse_quiz_response(response_text: str) -> List[Dict[str, Any]]:
    """
    Locate the JSON array inside generator output and parse it

    Raises:
        QuizFormatError: no parseable array of questions
    """
    match = QUIZ_ARRAY_PATTERN.search(response_text or "")
    candidate = match.group(0) if match else (response_text or "")

    try:
        questions = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse quiz JSON: {str(e)}")
        logger.error(f"Response text: {(response_text or '')[:500]}")
        raise QuizFormatError("Generator response is not valid JSON") from e

    if not isinstance(questions, list):
        raise QuizFormatError("Response is not an array")
    if not all(isinstance(q, dict) for q in questions):
        raise QuizFormatError("Response array contains non-object entries")

    return questions


def repair_question(question: Dict[str, Any], index: int) -> Dict[str, Any]:
    """Fill in options and correct label so the question can be graded"""
    if any(not question.get(field) for field in REQUIRED_FIELDS):
        logger.warning(f"Quiz question {index} is missing required fields, applying defaults")

    options = question.get("options")
    if not isinstance(options, dict) or not all(label in options for label in OPTION_LABELS):
        logger.warning(f"Quiz question {index} has invalid options, applying defaults")
        question["options"] = dict(PLACEHOLDER_OPTIONS)

    correct = question.get("correctAnswer")
    if isinstance(correct, str) and correct.strip().upper() in OPTION_LABELS:
        question["correctAnswer"] = correct.strip().upper()
    else:
        logger.warning(f"Quiz question {index} has invalid correctAnswer, defaulting to A")
        question["correctAnswer"] = "A"

    return question


def sanitize_quiz(questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Caller-facing view: question text and options only"""
    return [
        {
            "id": index,
            "question": question.get("question"),
            "options": question.get("options"),
        }
        for index, question in enumerate(questions)
    ]


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text.strip())


class QuizService:
    """Generator-backed quiz operations"""

    def __init__(self, gemini: GeminiService):
        self.gemini = gemini

    async def generate_quiz(self, topic: str, difficulty: str, count: int) -> List[Dict[str, Any]]:
        """
        Ask the generator for a quiz and repair its shape

        Raises:
            QuizFormatError: output could not be parsed
            Exception: generator call failures propagate unchanged
        """
        prompt = build_quiz_prompt(topic, difficulty, count)
        response_text = await self.gemini.generate_content(prompt)

        questions = parse_quiz_response(response_text)
        if len(questions) != count:
            logger.warning(f"Expected {count} questions, got {len(questions)}")

        return [repair_question(question, index) for index, question in enumerate(questions)]

    async def generate_hint(self, question: Dict[str, Any]) -> str:
        return await self.gemini.generate_content(build_hint_prompt(question))

    async def generate_fun_facts(self) -> Dict[str, Any]:
        """
        Fun-fact quiz in Bahasa Indonesia, returned as the generator's JSON

        Raises:
            json.JSONDecodeError: generator returned something other than JSON
        """
        response_text = await self.gemini.generate_content(KABOOM_PROMPT)
        return json.loads(strip_code_fences(response_text))


def get_quiz_service(gemini: GeminiService = Depends(get_gemini_service)) -> QuizService:
    """FastAPI dependency binding the quiz service to the Gemini client"""
    return QuizService(gemini)
