from rich.pretty import pprint

from argsenvs import *

__prog__ = "argsenvs-demo"


def positive(name, value, values):
    return None if value > 0 else "%s must be positive" % name


options = (
    OptionDefinition("integer", ("--int", "-i"), env="INTEGER", type="integer", default=10, validators=positive),
    OptionDefinition("verbose", ("--verbose", "-v"), env="VERBOSE", type="boolean", default=False),
    OptionDefinition("token", "--token", env="TOKEN", silent=True),
    OptionDefinition("files", "positional"),
    OptionDefinition("rest", "--"),
)


if __name__ == '__main__':
    pprint(parse({"shell": True, "fancy": True}, options))
