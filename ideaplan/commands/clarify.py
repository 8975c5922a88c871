"""
ideaplan clarify - Run the clarification dialogue for an idea.
"""

import sys
from pathlib import Path

from ideaplan.clarifier.agent import ClarifierAgent
from ideaplan.clarifier.models import ClarificationSession
from ideaplan.lib.constants import EXIT_INVALID, EXIT_OK


def _read_idea(args) -> str:
    if args.file:
        return Path(args.file).read_text()
    if args.idea == "-":
        return sys.stdin.read()
    return args.idea or ""


def print_session(session: ClarificationSession) -> None:
    print(f"Clarification: {session.idea_id}")
    print("=" * 60)
    print(f"Status:     {session.status.value}")
    print(f"Confidence: {session.confidence:.2f}")
    print(f"Updated:    {session.updated_at:%Y-%m-%d %H:%M}")
    print()

    print(f"{'ID':<8} {'TYPE':<16} {'REQ':<4} QUESTION")
    print("─" * 80)
    for q in session.questions:
        marker = "*" if q.required else ""
        text = q.text[:50] + "..." if len(q.text) > 50 else q.text
        print(f"{q.id:<8} {q.type:<16} {marker:<4} {text}")
        answer = session.answers.get(q.id)
        if answer:
            print(f"{'':<8} -> {answer}")
    print("─" * 80)

    answered = sum(1 for q in session.questions if session.answers.get(q.id))
    print(f"{answered}/{len(session.questions)} answered")

    if session.refined_idea:
        print()
        print("Refined idea")
        print("-" * 40)
        print(session.refined_idea)


def cmd_clarify_start(args, agent: ClarifierAgent) -> int:
    """Start (or resume) clarification for an idea."""
    try:
        idea_text = _read_idea(args)
    except OSError as e:
        print(f"ERROR: Cannot read idea file: {e}")
        return EXIT_INVALID
    session = agent.start_clarification(args.idea_id, idea_text)
    print_session(session)
    print()
    print(f"Use 'ideaplan clarify answer {session.idea_id} <question-id>' to answer")
    return EXIT_OK


def cmd_clarify_answer(args, agent: ClarifierAgent) -> int:
    """Answer one question."""
    answer = args.answer
    if not answer:
        session = agent.get_session(args.idea_id)
        question = session.question(args.question_id) if session else None
        if question is None:
            print(f"ERROR: Question '{args.question_id}' not found for '{args.idea_id}'")
            return EXIT_INVALID

        print(question.text)
        if question.options:
            for i, opt in enumerate(question.options, 1):
                print(f"  {i}. {opt}")
            answer = input("Your answer (number or text): ").strip()
            if answer.isdigit() and 0 < int(answer) <= len(question.options):
                answer = question.options[int(answer) - 1]
        else:
            answer = input("Your answer: ").strip()

    session = agent.submit_answer(args.idea_id, args.question_id, answer)
    print(f"Recorded answer to {args.question_id} (confidence {session.confidence:.2f})")
    if session.is_complete:
        print("Clarification complete")
    return EXIT_OK


def cmd_clarify_show(args, agent: ClarifierAgent) -> int:
    session = agent.get_session(args.idea_id)
    if session is None:
        print(f"ERROR: No clarification for '{args.idea_id}'")
        return EXIT_INVALID
    print_session(session)
    return EXIT_OK


def cmd_clarify_complete(args, agent: ClarifierAgent) -> int:
    """Refine the idea from the answers."""
    session = agent.complete_clarification(args.idea_id)
    print_session(session)
    return EXIT_OK
