from rich.pretty import pprint

from argot import *

program = Program().describe("argot demo").command(
    Command("build", "compile a source file")
    .flag("verbose", short="v", describe="print more")
    .named("jobs", short="j", value="workers", parse=int, default=1, describe="parallel jobs")
    .pos("source", "input file")
    .rest("extra", "forwarded to the compiler", required=False)
    .handler(pprint)
).command(
    Command("inspect", "show the declared command tree")
    .handler(lambda arguments: pprint(program))
)


if __name__ == '__main__':
    program.parse()
