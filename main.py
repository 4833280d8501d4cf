import asyncio
import logging
import sys

from rich.logging import RichHandler
from rich.pretty import pprint

from botnaut import *

__prog__ = "botnaut"

registry = Registry("!", shell=True, fancy=True, colorful=True)

bans = {}


@registry.command("ban", "b", parsers=(IntegerParser(minimum=1), StringParser()), descr="ban a member")
async def ban(ctx, id: int, reason: str):
    bans[id] = reason
    print(f"banned {id}: {reason}")


@ban.action(IntegerParser(minimum=1))
async def ban_silently(ctx, id: int):
    bans[id] = None
    print(f"banned {id}")


@ban.action(subcommand=("list", "ls"))
def ban_list(ctx):
    pprint(bans)


@ban.action(IntegerParser(minimum=1), subcommand="lift")
def ban_lift(ctx, id: int):
    if id not in bans:
        return print(f"{id} was not banned")
    del bans[id]
    print(f"lifted {id}")


@registry.command("toggle", parsers=(ChoiceParser("logs", "echo"), BooleanParser()))
def toggle(ctx, feature, enabled):
    print(f"{feature} {'enabled' if enabled else 'disabled'}")


async def main():
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            return
        await registry.invoke(line, session=sys.stdin)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])
    pprint(ban)
    asyncio.run(main())
