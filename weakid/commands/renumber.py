"""
Rewrite a reference document with freshly issued ids.
"""

import logging
import sys

from .. import yamlutil
from .main import Command

__all__ = ["renumber"]


class Renumber(Command):
    @classmethod
    def setup_arguments(cls, subparsers):
        parser = subparsers.add_parser(
            "renumber",
            help="Reassign ids in a reference document.",
            description="""Load a YAML reference document and write it back
            out with ids issued sequentially from 1, in document order.""",
        )

        parser.add_argument("filename", help="The YAML file to renumber.")
        parser.add_argument(
            "--output",
            "-o",
            type=str,
            help="""The name of the output file.  If not provided the
            result is written to stdout.""",
        )

        parser.set_defaults(func=cls.run)

        return parser

    @classmethod
    def run(cls, args):
        return renumber(args.filename, args.output)


def renumber(input_, output=None):
    """
    Renumber the ids of a YAML reference document.

    Parameters
    ----------
    input_ : str
        The input file.

    output : str, optional
        The output file.  Defaults to stdout.
    """
    with open(input_) as fd:
        documents = yamlutil.load_all(fd)
    logging.debug("Loaded %d document(s) from %s", len(documents), input_)

    # a new scope, so ids start over at 1
    if output is None:
        yamlutil.dump_all(documents, sys.stdout)
    else:
        with open(output, "w") as fd:
            yamlutil.dump_all(documents, fd)
        logging.debug("Wrote %s", output)
