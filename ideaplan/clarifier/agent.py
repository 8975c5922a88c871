"""
Clarifier agent: drives one clarification session per idea.

Lifecycle:
    start_clarification  -> generator asks 3-10 questions, status "clarifying"
    submit_answer        -> confidence recomputed; at the completion
                            threshold the session moves to "complete"
    complete_clarification -> generator refines the idea from the answers

Mutations for one idea id are serialised, across processes too when the
store is file-backed; different ideas never block
each other.
"""

import logging
from datetime import datetime
from typing import Optional

from ideaplan.errors import GenerationError, NotFoundError, ValidationError
from ideaplan.generator.base import ContentGenerator
from ideaplan.lib.config import PlannerConfig
from ideaplan.lib.constants import KIND_CLARIFICATION
from ideaplan.lib.locking import KeyedLocks, idea_lock
from ideaplan.lib.validate import SchemaError, require_idea_id, require_text, validate
from ideaplan.store import SessionStore

from .confidence import ConfidenceCalculator
from .fsm import ClarificationFSM
from .models import QUESTION_TYPES, ClarificationSession, Question

logger = logging.getLogger(__name__)


class ClarifierAgent:
    def __init__(
        self,
        generator: ContentGenerator,
        store: SessionStore,
        config: Optional[PlannerConfig] = None,
    ):
        self.generator = generator
        self.store = store
        self.config = config or PlannerConfig()
        self.calculator = ConfidenceCalculator(self.config)
        self._locks = KeyedLocks()

    # --- Queries ---

    def get_session(self, idea_id: str) -> Optional[ClarificationSession]:
        data = self.store.get(KIND_CLARIFICATION, idea_id)
        if data is None:
            return None
        return ClarificationSession.from_dict(data)

    # --- Mutations ---

    def start_clarification(self, idea_id: str, idea_text: str) -> ClarificationSession:
        """Create the session for idea_id, or return the existing one unchanged."""
        require_idea_id(idea_id)
        require_text("idea_text", idea_text, self.config.max_idea_length)

        with self._hold(idea_id):
            existing = self.get_session(idea_id)
            if existing is not None:
                logger.info(f"Clarification for {idea_id} already exists ({existing.status.value})")
                return existing

            try:
                raw = self.generator.generate_questions(idea_text)
            except GenerationError:
                logger.error(f"Question generation failed for {idea_id}")
                raise

            questions = self._normalize_questions(raw)
            session = ClarificationSession(
                idea_id=idea_id,
                idea_text=idea_text,
                questions=questions,
                confidence=self.calculator.calculate(0, len(questions)),
            )
            self.store.upsert(KIND_CLARIFICATION, idea_id, session.to_dict())

        logger.info(f"Started clarification for {idea_id} with {len(questions)} questions")
        return session

    def submit_answer(self, idea_id: str, question_id: str, answer: str) -> ClarificationSession:
        """Record an answer, recompute confidence, complete the session at the threshold."""
        require_idea_id(idea_id)

        with self._hold(idea_id):
            session = self._require_session(idea_id)
            question = session.question(question_id)
            if question is None:
                raise ValidationError("question_id", f"unknown question {question_id!r} for {idea_id}")
            require_text("answer", answer, self.config.max_answer_length)

            if session.answers.get(question_id) == answer:
                return session
            if session.is_complete:
                raise ValidationError("idea_id", f"clarification for {idea_id} is already complete")

            session.answers[question_id] = answer
            question.answered = True
            session.confidence = max(
                session.confidence,
                self.calculator.calculate_from_answers(session.answers, len(session.questions)),
            )
            session.updated_at = datetime.now()

            if session.confidence >= self.config.complete_threshold:
                ClarificationFSM(session).finish()

            self.store.upsert(KIND_CLARIFICATION, idea_id, session.to_dict())

        logger.debug(f"{idea_id}: answered {question_id}, confidence {session.confidence:.2f}")
        return session

    def complete_clarification(self, idea_id: str) -> ClarificationSession:
        """Refine the idea from the answers and close the session."""
        require_idea_id(idea_id)

        with self._hold(idea_id):
            session = self._require_session(idea_id)
            if session.refined_idea:
                return session

            missing = session.unanswered_required()
            if missing:
                raise ValidationError("answers", f"required questions unanswered: {', '.join(missing)}")

            try:
                refined = self.generator.refine_idea(session.idea_text, session.qa_pairs())
            except GenerationError:
                logger.error(f"Idea refinement failed for {idea_id}")
                raise
            if not refined or not refined.strip():
                raise GenerationError("refine_idea", "generator returned an empty refined idea")

            session.refined_idea = refined.strip()
            session.confidence = self.config.max_confidence
            fsm = ClarificationFSM(session)
            if fsm.can_finish():
                fsm.finish()
            session.updated_at = datetime.now()
            self.store.upsert(KIND_CLARIFICATION, idea_id, session.to_dict())

        logger.info(f"Completed clarification for {idea_id}")
        return session

    # --- Internals ---

    def _hold(self, idea_id: str):
        return idea_lock(self._locks, idea_id, self.config.lock_timeout, self.store, KIND_CLARIFICATION)

    def _require_session(self, idea_id: str) -> ClarificationSession:
        session = self.get_session(idea_id)
        if session is None:
            raise NotFoundError("clarification session", idea_id)
        return session

    def _normalize_questions(self, raw) -> list[Question]:
        """Turn a generator payload into Questions, enforcing id uniqueness and count."""
        try:
            validate(raw, "questions")
        except SchemaError as e:
            raise GenerationError("generate_questions", str(e)) from e

        questions: list[Question] = []
        seen: set[str] = set()
        for i, item in enumerate(raw, 1):
            text = item["question"].strip()
            if not text:
                raise GenerationError("generate_questions", f"question {i} is empty")
            qid = item.get("id") or f"q_{i}"
            if qid in seen:
                raise GenerationError("generate_questions", f"duplicate question id {qid!r}")
            seen.add(qid)

            qtype = item.get("type", "open")
            if qtype not in QUESTION_TYPES:
                qtype = "open"
            questions.append(Question(
                id=qid,
                text=text,
                type=qtype,
                options=list(item.get("options", [])),
                required=item.get("required", True),
            ))

        lo, hi = self.config.min_questions, self.config.max_questions
        if not lo <= len(questions) <= hi:
            raise GenerationError(
                "generate_questions",
                f"expected {lo}-{hi} questions, got {len(questions)}",
            )
        return questions
