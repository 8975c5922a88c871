#!/usr/bin/env python3
"""ideaplan CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from ideaplan.breakdown.engine import BreakdownEngine
from ideaplan.clarifier.agent import ClarifierAgent
from ideaplan.commands import breakdown as cmd_breakdown_module
from ideaplan.commands import clarify as cmd_clarify_module
from ideaplan.errors import ConflictError, GenerationError, NotFoundError, PlannerError, ValidationError
from ideaplan.generator.claude import ClaudeContentGenerator
from ideaplan.lib.agents_config import load_agents_config, missing_binaries
from ideaplan.lib.config import PlannerConfig, load_planner_config
from ideaplan.lib.constants import (
    EXIT_CONFLICT,
    EXIT_GENERATION_ERROR,
    EXIT_INVALID,
)
from ideaplan.store import JsonFileStore

DEFAULT_DATA_DIR = ".ideaplan"


def get_config(args) -> PlannerConfig:
    """Load planner.env from --config-dir (default: current directory)."""
    config_dir = Path(args.config_dir) if args.config_dir else Path.cwd()
    return load_planner_config(config_dir)


def get_data_dir(config: PlannerConfig) -> Path:
    if config.data_dir is not None:
        return config.data_dir
    return (config.config_dir or Path.cwd()) / DEFAULT_DATA_DIR


def get_generator(config: PlannerConfig) -> ClaudeContentGenerator:
    agents_config = load_agents_config(config.config_dir)
    for binary, stages in missing_binaries(agents_config).items():
        logging.getLogger(__name__).warning(f"{binary} not found in PATH (used by: {', '.join(stages)})")
    return ClaudeContentGenerator(agents_config, config)


def get_store(config: PlannerConfig) -> JsonFileStore:
    return JsonFileStore(get_data_dir(config), config.lock_timeout)


def get_agent(args) -> ClarifierAgent:
    config = get_config(args)
    return ClarifierAgent(get_generator(config), get_store(config), config)


def get_engine(args) -> BreakdownEngine:
    config = get_config(args)
    return BreakdownEngine(get_generator(config), get_store(config), config)


def cmd_clarify_start(args):
    return cmd_clarify_module.cmd_clarify_start(args, get_agent(args))


def cmd_clarify_answer(args):
    return cmd_clarify_module.cmd_clarify_answer(args, get_agent(args))


def cmd_clarify_show(args):
    return cmd_clarify_module.cmd_clarify_show(args, get_agent(args))


def cmd_clarify_complete(args):
    return cmd_clarify_module.cmd_clarify_complete(args, get_agent(args))


def cmd_breakdown_run(args):
    return cmd_breakdown_module.cmd_breakdown_run(args, get_engine(args), get_agent(args))


def cmd_breakdown_show(args):
    return cmd_breakdown_module.cmd_breakdown_show(args, get_engine(args))


def exit_code_for(error: PlannerError) -> int:
    if isinstance(error, GenerationError):
        return EXIT_GENERATION_ERROR
    if isinstance(error, ConflictError):
        return EXIT_CONFLICT
    if isinstance(error, (ValidationError, NotFoundError)):
        return EXIT_INVALID
    return EXIT_GENERATION_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='ideaplan', description='Clarify an idea and break it into a plan')
    parser.add_argument('--config-dir', '-c', help='Directory with planner.env and agents.yaml (default: cwd)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # ideaplan clarify
    p_clarify = subparsers.add_parser('clarify', help='Clarification dialogue')
    clarify_sub = p_clarify.add_subparsers(dest='clarify_cmd', required=True)

    # ideaplan clarify start
    p_clarify_start = clarify_sub.add_parser('start', help='Generate clarifying questions for an idea')
    p_clarify_start.add_argument('idea_id', help='Idea ID (letters, digits, - and _)')
    p_clarify_start.add_argument('idea', nargs='?', help="Idea text ('-' reads stdin)")
    p_clarify_start.add_argument('--file', '-f', help='Read idea text from file')
    p_clarify_start.set_defaults(func=cmd_clarify_start)

    # ideaplan clarify answer
    p_clarify_answer = clarify_sub.add_parser('answer', help='Answer a question')
    p_clarify_answer.add_argument('idea_id', help='Idea ID')
    p_clarify_answer.add_argument('question_id', help='Question ID (e.g., q_1)')
    p_clarify_answer.add_argument('--answer', '-a', help='Answer text (prompts if not provided)')
    p_clarify_answer.set_defaults(func=cmd_clarify_answer)

    # ideaplan clarify show
    p_clarify_show = clarify_sub.add_parser('show', help='Show questions, answers and confidence')
    p_clarify_show.add_argument('idea_id', help='Idea ID')
    p_clarify_show.set_defaults(func=cmd_clarify_show)

    # ideaplan clarify complete
    p_clarify_complete = clarify_sub.add_parser('complete', help='Refine the idea from the answers')
    p_clarify_complete.add_argument('idea_id', help='Idea ID')
    p_clarify_complete.set_defaults(func=cmd_clarify_complete)

    # ideaplan breakdown
    p_breakdown = subparsers.add_parser('breakdown', help='Plan generation')
    breakdown_sub = p_breakdown.add_subparsers(dest='breakdown_cmd', required=True)

    # ideaplan breakdown run
    p_breakdown_run = breakdown_sub.add_parser('run', help='Analyze, decompose and schedule an idea')
    p_breakdown_run.add_argument('idea_id', help='Idea ID')
    p_breakdown_run.add_argument('--idea', '-i', help='Idea text (default: refined idea from clarification)')
    p_breakdown_run.add_argument('--team-size', '-t', type=int, help='Team size (default: 1)')
    p_breakdown_run.add_argument('--weeks', '-w', type=int, help='Target timeline in weeks')
    p_breakdown_run.add_argument('--json', action='store_true', help='Print the session as JSON')
    p_breakdown_run.set_defaults(func=cmd_breakdown_run)

    # ideaplan breakdown show
    p_breakdown_show = breakdown_sub.add_parser('show', help='Show the stored breakdown')
    p_breakdown_show.add_argument('idea_id', help='Idea ID')
    p_breakdown_show.add_argument('--json', action='store_true', help='Print the session as JSON')
    p_breakdown_show.set_defaults(func=cmd_breakdown_show)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        return args.func(args)
    except PlannerError as e:
        print(f"ERROR: {e}")
        if e.retryable:
            print("This error is retryable; run the command again")
        return exit_code_for(e)


if __name__ == '__main__':
    sys.exit(main())
