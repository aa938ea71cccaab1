"""CLI entry point for chatting with the jot agent."""

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from jot_core.agent import DEFAULT_SYSTEM_PROMPT, Agent
from jot_core.config import JotConfig
from jot_core.errors import JotError
from jot_core.messages import Message
from jot_core.tools import FunctionToolDispatcher, register_builtin_tools
from jot_core.transports import create_transport

PROMPT = "jot> "


def build_agent(config: JotConfig) -> Agent:
    """Wire a transport, the built-in tools and config into an Agent."""
    dispatcher = register_builtin_tools(FunctionToolDispatcher())
    return Agent(
        transport=create_transport(config),
        dispatcher=dispatcher,
        tools=dispatcher.definitions,
        system_prompt=config.system_prompt or DEFAULT_SYSTEM_PROMPT,
        max_context_tokens=config.max_context_tokens,
        max_tool_rounds=config.max_tool_rounds,
        min_message_budget=config.min_message_budget,
    )


async def run_repl(
    agent: Agent,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    stderr: TextIO = sys.stderr,
) -> list[Message]:
    """Read user lines and print agent replies until EOF or exit.

    When stdin is not a terminal, a single exchange is run.

    Returns:
        The conversation history at exit.
    """
    interactive = stdin.isatty()
    history: list[Message] = []

    def prompt() -> None:
        if interactive:
            stdout.write(PROMPT)
            stdout.flush()

    prompt()
    for line in stdin:
        text = line.strip()
        if not text:
            prompt()
            continue
        if text in ("exit", "quit"):
            break

        try:
            result = await agent.run(history, text)
        except JotError as e:
            stderr.write(f"error: {e}\n")
        else:
            stdout.write(result.text + "\n")
            history = result.history

        if not interactive:
            break
        prompt()
    return history


async def chat(
    agent: Agent,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    stderr: TextIO = sys.stderr,
) -> list[Message]:
    """Run the REPL, then close the agent's transport."""
    try:
        return await run_repl(agent, stdin, stdout, stderr)
    finally:
        await agent.aclose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="jot",
        description="jot: a tool-calling personal assistant",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("chat", help="Chat on stdin/stdout (default)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command in (None, "chat"):
        try:
            agent = build_agent(JotConfig())
        except (JotError, ValueError) as e:
            print(f"error: {e}", file=sys.stderr)
            sys.exit(2)
        asyncio.run(chat(agent))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
