import html
import logging
import time
from typing import Dict, List, Optional

import requests

from app.core.config import settings
from app.domain.quiz_domain import Question
from app.schemas.quiz import Difficulty, QuestionType
from app.services.fallback_questions import (
    GENERAL_CATEGORY,
    get_fallback_questions,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RESPONSE_SUCCESS = 0
RESPONSE_NO_RESULTS = 1
RESPONSE_INVALID_PARAMETER = 2
RESPONSE_TOKEN_NOT_FOUND = 3
RESPONSE_TOKEN_EMPTY = 4

RESPONSE_MESSAGES = {
    RESPONSE_SUCCESS: "Success",
    RESPONSE_NO_RESULTS: "No Results - The API doesn't have enough questions for your query.",
    RESPONSE_INVALID_PARAMETER: "Invalid Parameter - Arguments passed in aren't valid.",
    RESPONSE_TOKEN_NOT_FOUND: "Token Not Found - Session Token does not exist.",
    RESPONSE_TOKEN_EMPTY: "Token Empty - Session Token has returned all possible questions.",
}

# Our category keys -> Open Trivia DB category ids
CATEGORY_MAPPING = {
    "science": "17",  # Science & Nature
    "history": "23",
    "sports": "21",
    "geography": "22",
    "entertainment": "11",  # Entertainment: Film
    GENERAL_CATEGORY: "9",  # General Knowledge
    "mathematics": "19",  # Science: Mathematics
    "computer": "18",  # Science: Computers
    "music": "12",  # Entertainment: Music
    "literature": "10",  # Entertainment: Books
}

CATEGORY_NAMES = {
    GENERAL_CATEGORY: "General Knowledge",
    "science": "Science & Nature",
    "history": "History",
    "sports": "Sports",
    "geography": "Geography",
    "entertainment": "Entertainment",
    "mathematics": "Mathematics",
    "computer": "Computer Science",
    "music": "Music",
    "literature": "Literature",
}


def response_message(code: Optional[int]) -> str:
    if code is None:
        return "Unknown error"
    return RESPONSE_MESSAGES.get(code, f"Unknown response code: {code}")


def is_general_category(category: Optional[str]) -> bool:
    return (category or "").lower() == GENERAL_CATEGORY


class OpenTriviaProvider:
    """Fetches question batches from Open Trivia DB.

    Transport and HTTP errors are retried with a linearly growing delay.
    When nothing usable comes back, the hardcoded fallback bank is served,
    so ``fetch_questions`` never raises.
    """

    def __init__(
        self,
        base_url: str = None,
        max_retries: int = None,
        backoff_seconds: float = None,
        timeout: float = None,
    ):
        self.base_url = base_url or settings.OPENTDB_BASE_URL
        self.max_retries = max_retries or settings.OPENTDB_MAX_RETRIES
        self.backoff_seconds = (
            settings.OPENTDB_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )
        self.timeout = timeout or settings.OPENTDB_TIMEOUT_SECONDS

    def _build_params(self, category: str, difficulty: Optional[str], amount: int) -> Dict[str, str]:
        params = {"amount": str(amount)}

        category_id = CATEGORY_MAPPING.get((category or "").lower())
        if category_id:
            params["category"] = category_id

        if difficulty and difficulty.strip():
            params["difficulty"] = difficulty.strip().lower()

        return params

    @staticmethod
    def _parse_question(item: dict) -> Question:
        return Question(
            category=html.unescape(item.get("category", "")),
            type=QuestionType(item.get("type", QuestionType.MULTIPLE.value)),
            difficulty=Difficulty(item.get("difficulty", Difficulty.MEDIUM.value)),
            question=html.unescape(item["question"]),
            correct_answer=html.unescape(item["correct_answer"]),
            incorrect_answers=tuple(
                html.unescape(a) for a in item.get("incorrect_answers") or []
            ),
        )

    def fetch_questions(
        self, category: str, difficulty: Optional[str], amount: int
    ) -> List[Question]:
        """Fetch ``amount`` questions, supplementing or falling back as needed"""
        try:
            params = self._build_params(category, difficulty, amount)
            logger.info(f"🌐 Open Trivia DB request: {self.base_url} {params}")

            for attempt in range(1, self.max_retries + 1):
                try:
                    response = requests.get(
                        self.base_url, params=params, timeout=self.timeout
                    )
                    response.raise_for_status()
                    payload = response.json()
                except (requests.ConnectionError, requests.Timeout, requests.HTTPError) as e:
                    logger.warning(
                        f"⚠️ Open Trivia DB error on attempt {attempt}/{self.max_retries}: {e}"
                    )
                    if attempt == self.max_retries:
                        return self._fallback(category, difficulty, amount)
                    time.sleep(self.backoff_seconds * attempt)
                    continue

                code = payload.get("response_code")
                results = payload.get("results") or []

                if code == RESPONSE_SUCCESS and results:
                    questions = [self._parse_question(item) for item in results]
                    if len(questions) >= amount:
                        return questions[:amount]
                    return self._fill_with_general(questions, amount, difficulty, category)

                if code in (RESPONSE_SUCCESS, RESPONSE_NO_RESULTS):
                    logger.warning(
                        f"⚠️ Not enough questions for category '{category}': "
                        f"{response_message(RESPONSE_NO_RESULTS)}"
                    )
                    if not is_general_category(category):
                        return self.fetch_questions(GENERAL_CATEGORY, difficulty, amount)
                else:
                    logger.error(f"❌ Open Trivia DB API error: {response_message(code)}")

            return self._fallback(category, difficulty, amount)

        except Exception as e:
            logger.error(f"❌ Unexpected error fetching questions: {e}")
            return self._fallback(category, difficulty, amount)

    def _fill_with_general(
        self,
        questions: List[Question],
        amount: int,
        difficulty: Optional[str],
        category: str,
    ) -> List[Question]:
        """Top up a short batch with general-knowledge questions"""
        if is_general_category(category):
            # Nothing more generic to draw from
            return questions

        needed = amount - len(questions)
        logger.info(f"➕ Supplementing {needed} question(s) from general knowledge")
        general = self.fetch_questions(GENERAL_CATEGORY, difficulty, needed)
        return (questions + general)[:amount]

    def _fallback(self, category: str, difficulty: Optional[str], amount: int) -> List[Question]:
        logger.error(f"🛟 Using fallback questions for category: {category}")
        return get_fallback_questions(category, difficulty, amount)

    def available_categories(self) -> Dict[str, str]:
        return dict(CATEGORY_NAMES)

    def check_connectivity(self) -> bool:
        """Single lightweight request to see whether the provider answers"""
        try:
            response = requests.get(
                self.base_url, params={"amount": "1"}, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json().get("response_code") == RESPONSE_SUCCESS
        except Exception as e:
            logger.warning(f"⚠️ Open Trivia DB connectivity check failed: {e}")
            return False
