"""
ideaplan breakdown - Turn an idea into deliverables, tasks and a timeline.
"""

import json

from ideaplan.breakdown.engine import BreakdownEngine
from ideaplan.breakdown.models import BreakdownSession
from ideaplan.clarifier.agent import ClarifierAgent
from ideaplan.lib.constants import EXIT_INVALID, EXIT_OK


def print_breakdown(session: BreakdownSession) -> None:
    analysis, tasks, timeline = session.analysis, session.tasks, session.timeline

    print(f"Breakdown: {session.id} ({session.idea_id})")
    print("=" * 60)
    print(f"Confidence: {session.confidence:.2f}")
    print(f"Complexity: {analysis.complexity.score} ({analysis.complexity.level})")
    print(f"Duration:   {timeline.total_weeks} week(s), "
          f"{timeline.start_date:%Y-%m-%d} -> {timeline.end_date:%Y-%m-%d}")
    print(f"Team:       {timeline.resource_allocation.get('default')}")
    print()

    print(f"{'ID':<10} {'HOURS':>6}  {'DEPENDS ON':<20} TASK")
    print("─" * 80)
    for t in tasks.tasks:
        deps = ",".join(t.dependencies) or "-"
        print(f"{t.id:<10} {t.estimated_hours:>6g}  {deps:<20} {t.title}")
    print("─" * 80)
    print(f"{len(tasks.tasks)} task(s), {tasks.total_estimated_hours:g}h total")
    print()

    print("Phases")
    print("-" * 40)
    for phase in timeline.phases:
        print(f"{phase.name:<22} {phase.start_date:%Y-%m-%d} -> {phase.end_date:%Y-%m-%d}  "
              f"{len(phase.tasks)} task(s)")
    print()

    print("Milestones")
    print("-" * 40)
    for m in timeline.milestones:
        after = f" (after {', '.join(m.dependencies)})" if m.dependencies else ""
        print(f"{m.id:<6} {m.date:%Y-%m-%d}  {m.title}{after}")
    print()

    print(f"Critical path: {' -> '.join(timeline.critical_path) or '(none)'}")


def cmd_breakdown_run(args, engine: BreakdownEngine, agent: ClarifierAgent) -> int:
    """Run a breakdown, using the clarification session for text and answers when present."""
    clarification = agent.get_session(args.idea_id)
    idea_text = args.idea
    answers = {}
    if clarification is not None:
        idea_text = idea_text or clarification.refined_idea or clarification.idea_text
        answers = dict(clarification.answers)
    if not idea_text:
        print(f"ERROR: No idea text for '{args.idea_id}'. Pass --idea or run 'ideaplan clarify start' first")
        return EXIT_INVALID

    options = {}
    if args.team_size is not None:
        options["team_size"] = args.team_size
    if args.weeks is not None:
        options["timeline_weeks"] = args.weeks

    session = engine.start_breakdown(args.idea_id, idea_text, answers, options)
    if args.json:
        print(json.dumps(session.to_dict(), indent=2))
    else:
        print_breakdown(session)
    return EXIT_OK


def cmd_breakdown_show(args, engine: BreakdownEngine) -> int:
    session = engine.get_breakdown_session(args.idea_id)
    if session is None:
        print(f"ERROR: No breakdown for '{args.idea_id}'")
        return EXIT_INVALID
    if args.json:
        print(json.dumps(session.to_dict(), indent=2))
    else:
        print_breakdown(session)
    return EXIT_OK
