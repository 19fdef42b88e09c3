"""
Verify that every reference in a document resolves.
"""

from .. import yamlutil
from ..context import registry_context
from .main import Command

__all__ = ["check"]


class Check(Command):
    @classmethod
    def setup_arguments(cls, subparsers):
        parser = subparsers.add_parser(
            "check",
            help="Check the references of a reference document.",
            description="""Load a YAML reference document, failing if an
            id is malformed or assigned twice, or if a reference does
            not resolve to an object defined earlier in the stream.""",
        )

        parser.add_argument("filename", help="The YAML file to check.")

        parser.set_defaults(func=cls.run)

        return parser

    @classmethod
    def run(cls, args):
        check(args.filename)


def check(filename):
    with registry_context() as registry, open(filename) as fd:
        documents = yamlutil.load_all(fd)
        print(f"{filename}: {len(documents)} document(s), {len(registry)} object(s) with ids")
