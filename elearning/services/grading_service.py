"""
Quiz grading service
Exact label matching against stored multiple-choice questions
"""
import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

LEADING_INTEGER_PATTERN = re.compile(r"^\s*([+-]?\d+)")


class GradingService:
    """
    Service for grading answer submissions against a stored quiz

    Accepted answer forms:
    - bare labels: ["A", "D"] - position i answers question i
    - objects: [{"questionId": 1, "answer": "d"}] - `id` is accepted too
    - a single label or object, treated as a one-element list
    """

    PERFORMANCE_MESSAGES = (
        (90, "Excellent! You've mastered this topic."),
        (70, "Very good! You have a solid understanding of this topic."),
        (50, "Good effort! Review the explanations to improve your understanding."),
    )
    DEFAULT_PERFORMANCE_MESSAGE = "Keep practicing! Review the explanations to strengthen your knowledge."

    def normalize_answers(self, answers: Any) -> List[Tuple[Optional[int], str]]:
        """
        Flatten a submission into (question_id, label) pairs

        question_id is None when the submitted id cannot be read as an integer.
        """
        entries = answers if isinstance(answers, list) else [answers]
        normalized = []

        for position, entry in enumerate(entries):
            if isinstance(entry, dict):
                raw_id = entry.get("questionId", entry.get("id", 0))
                question_id = self._parse_question_id(raw_id)
                raw_answer = entry.get("answer")
                label = str(raw_answer).strip().upper() if raw_answer is not None else ""
            elif isinstance(entry, str):
                question_id = position
                label = entry.strip().upper()
            else:
                question_id = position
                label = ""
            normalized.append((question_id, label))

        return normalized

    @staticmethod
    def _parse_question_id(raw_id: Any) -> Optional[int]:
        """Leading integer of the id, so "1abc" and "1.5" both read as 1"""
        if isinstance(raw_id, bool):
            return None
        if isinstance(raw_id, int):
            return raw_id
        if isinstance(raw_id, float):
            return int(raw_id) if math.isfinite(raw_id) else None

        match = LEADING_INTEGER_PATTERN.match(str(raw_id)) if isinstance(raw_id, str) else None
        return int(match.group(1)) if match else None

    def performance_message(self, score: float) -> str:
        for threshold, message in self.PERFORMANCE_MESSAGES:
            if score >= threshold:
                return message
        return self.DEFAULT_PERFORMANCE_MESSAGE

    def _feedback(self, is_correct: bool, correct_answer: str, options: Dict[str, str], explanation: str) -> str:
        if is_correct:
            return f"✅ Correct! {explanation}"

        correct_text = options.get(correct_answer) or f"Option {correct_answer}"
        return f"❌ Not quite. The correct answer is {correct_answer}: {correct_text}. {explanation}"

    def grade(self, questions: List[Dict[str, Any]], answers: Any) -> Dict[str, Any]:
        """
        Grade a submission

        Args:
            questions: Stored quiz content
            answers: Raw submission in any accepted form

        Returns:
            Dict with score (one-decimal string), correctCount, totalQuestions,
            performanceMessage, results and answeredAll
        """
        total = len(questions)
        results = []
        correct_ids = set()
        answered_ids = set()

        for question_id, label in self.normalize_answers(answers):
            if question_id is None or not 0 <= question_id < total:
                results.append({
                    "valid": False,
                    "message": "Question does not exist",
                    "questionId": question_id
                })
                continue

            question = questions[question_id]
            options = question.get("options") or {}
            correct_answer = str(question.get("correctAnswer", "A")).upper()
            explanation = question.get("explanation") or ""
            is_correct = label == correct_answer

            answered_ids.add(question_id)
            if is_correct:
                correct_ids.add(question_id)

            logger.debug(
                f"Q{question_id}: user={label!r} correct={correct_answer!r} "
                f"{'CORRECT' if is_correct else 'INCORRECT'}"
            )

            results.append({
                "questionId": question_id,
                "question": question.get("question"),
                "userAnswer": label,
                "isCorrect": is_correct,
                "correctAnswer": correct_answer,
                "correctOption": options.get(correct_answer),
                "explanation": explanation,
                "options": options,
                "feedbackMessage": self._feedback(is_correct, correct_answer, options, explanation)
            })

        correct_count = len(correct_ids)
        score = (correct_count / total * 100) if total > 0 else 0.0

        logger.info(f"Quiz graded: {correct_count}/{total} correct ({score:.1f}%)")

        return {
            "score": f"{score:.1f}",
            "correctCount": correct_count,
            "totalQuestions": total,
            "performanceMessage": self.performance_message(score),
            "results": results,
            "answeredAll": total > 0 and len(answered_ids) == total
        }


# Global instance
grading_service = GradingService()
