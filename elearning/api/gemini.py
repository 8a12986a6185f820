"""
AI quiz API endpoints - generation, answer checking and hints
"""
from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse
from google.api_core.exceptions import ResourceExhausted
import logging

from elearning.api.dependencies import get_quiz_store
from elearning.exceptions import BadRequestError, NotFoundError
from elearning.schemas.quiz import CheckAnswersRequest, HintRequest, QuizGenerateRequest
from elearning.services.grading_service import grading_service
from elearning.services.quiz_service import (
    FALLBACK_FUN_FACTS,
    NON_PROGRAMMING_TOPIC_MESSAGE,
    QuizFormatError,
    QuizService,
    get_quiz_service,
    is_programming_topic,
    normalize_difficulty,
    normalize_question_count,
    sanitize_quiz,
)
from elearning.utils.quiz_store import QuizSessionStore

router = APIRouter(prefix="/gemini", tags=["gemini"])
logger = logging.getLogger(__name__)


async def start_review_period(store: QuizSessionStore, quiz_id: str) -> None:
    """Runs after the grading response has been sent"""
    store.mark_graded(quiz_id)


@router.post("/generate-quiz")
async def generate_quiz(
    request: QuizGenerateRequest,
    store: QuizSessionStore = Depends(get_quiz_store),
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """
    Generate a multiple-choice quiz on a programming topic

    - Rejects non-programming topics before calling Gemini
    - Stores the full quiz in memory for 30 minutes
    - Returns questions without answers or explanations
    """
    topic = (request.topic or "").strip()
    if not topic:
        return JSONResponse(status_code=400, content={"success": False, "message": "Topic is required"})

    if not is_programming_topic(topic):
        return JSONResponse(status_code=400, content={"success": False, "message": NON_PROGRAMMING_TOPIC_MESSAGE})

    difficulty = normalize_difficulty(request.difficulty)
    count = normalize_question_count(request.number_of_questions)

    logger.info(f"Generating {difficulty} quiz: topic={topic!r}, questions={count}")

    try:
        questions = await quiz_service.generate_quiz(topic, difficulty, count)
    except QuizFormatError as e:
        logger.error(f"Failed to build quiz from generator output: {str(e)}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Failed to generate a properly formatted quiz. Please try again."
            }
        )

    quiz_id = store.create(questions)

    return {
        "success": True,
        "message": "Quiz generated successfully",
        "data": {
            "quizId": quiz_id,
            "topic": topic,
            "difficulty": difficulty,
            "questionCount": len(questions),
            "quiz": sanitize_quiz(questions)
        }
    }


@router.get("/generate-quiz-kaboom")
async def generate_quiz_kaboom(quiz_service: QuizService = Depends(get_quiz_service)):
    """
    Ten fun-fact questions in Bahasa Indonesia

    Falls back to a built-in question set when Gemini is rate limited.
    """
    try:
        return await quiz_service.generate_fun_facts()
    except ResourceExhausted:
        logger.warning("API rate limit exceeded. Using fallback quiz data.")
        return {
            **FALLBACK_FUN_FACTS,
            "source": "fallback",
            "message": "Quiz generated from fallback data due to API rate limits"
        }
    except Exception as e:
        logger.error(f"Error generating or parsing quiz: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to generate quiz", "message": str(e)}
        )


@router.post("/check-answers")
async def check_answers(
    request: CheckAnswersRequest,
    background_tasks: BackgroundTasks,
    store: QuizSessionStore = Depends(get_quiz_store)
):
    """
    Grade answers against a stored quiz

    The quiz stays available for a 15 minute review period after the first check.
    """
    if not request.quiz_id or request.answers in (None, ""):
        raise BadRequestError("Quiz ID and answers are required")

    quiz_id = str(request.quiz_id)
    questions = store.get(quiz_id)
    if questions is None:
        raise NotFoundError("Quiz not found. It may have expired or been completed already.")

    result = grading_service.grade(questions, request.answers)
    background_tasks.add_task(start_review_period, store, quiz_id)

    return {
        "success": True,
        "message": "Quiz answers checked successfully",
        "data": result
    }


@router.post("/get-hint")
async def get_hint(
    request: HintRequest,
    store: QuizSessionStore = Depends(get_quiz_store),
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """Generate a hint that nudges towards the answer without stating it"""
    if not request.quiz_id or request.question_index is None:
        raise BadRequestError("Quiz ID and question index are required")

    questions = store.get(str(request.quiz_id))
    if questions is None:
        raise NotFoundError("Quiz not found. It may have expired.")

    index = request.question_index
    if not 0 <= index < len(questions):
        raise BadRequestError("Invalid question index.")

    question = questions[index]
    hint = await quiz_service.generate_hint(question)

    return {
        "success": True,
        "data": {
            "questionIndex": index,
            "question": question.get("question"),
            "hint": hint
        }
    }
