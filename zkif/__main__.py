#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
import argcomplete
import argparse
import os
import sys

from argcomplete.completers import FilesCompleter, DirectoriesCompleter

from zkif.config_user import UserConfig
from zkif.utils.progress_printer import fail_print, success_print


def parse_config_doc():
    import textwrap
    from typing import get_type_hints
    __ucfg = UserConfig()

    docs = {}
    for name, prop in vars(UserConfig).items():
        if name.startswith('_') or not isinstance(prop, property):
            continue
        t = get_type_hints(prop.fget)['return']
        doc = prop.__doc__
        choices = None
        if hasattr(__ucfg, f'_{name}_values'):
            choices = getattr(__ucfg, f'_{name}_values')
        default_val = getattr(__ucfg, name)
        docs[name] = (
            f"type: {t}\n\n"
            f"{textwrap.dedent(doc).strip()}\n\n"
            f"Default value: {default_val}", t, default_val, choices)
    return docs


def parse_arguments():
    class ShowSuppressedInHelpFormatter(argparse.RawTextHelpFormatter):
        def add_usage(self, usage, actions, groups, prefix=None):
            if usage is not argparse.SUPPRESS:
                actions = [action for action in actions if action.metavar != '<cfg_val>']
                args = usage, actions, groups, prefix
                self._add_item(self._format_usage, args)

    main_parser = argparse.ArgumentParser(prog='zkif')
    message_files = ('zkif', )
    config_files = ('json', )

    msg = 'Path to local configuration file (defaults to "config.json" in cwd). ' \
          'This file (if it exists), overrides settings defined in the global configuration.'
    main_parser.add_argument('--config-file', default='config.json', metavar='<config_file>', help=msg).completer = FilesCompleter(config_files)

    # Shared 'config' parser
    config_parser = argparse.ArgumentParser(add_help=False)
    msg = 'These parameters can be used to override settings defined (and documented) in config_user.py'
    cfg_group = config_parser.add_argument_group(title='Configuration Options', description=msg)

    # Expose config_user.py options via command line arguments, they are supported in all parsers
    cfg_docs = parse_config_doc()

    def add_config_args(parser, arg_names):
        for name in arg_names:
            doc, t, defval, choices = cfg_docs[name]

            if t is bool:
                if defval:
                    parser.add_argument(f'--no-{name.replace("_", "-")}', dest=name, help=doc, action='store_false')
                else:
                    parser.add_argument(f'--{name.replace("_", "-")}', dest=name, help=doc, action='store_true')
            elif t is int:
                parser.add_argument(f'--{name.replace("_", "-")}', type=int, dest=name, metavar='<cfg_val>', help=doc)
            else:
                arg = parser.add_argument(f'--{name.replace("_", "-")}', dest=name, metavar='<cfg_val>', help=doc,
                                          choices=choices)
                if name.endswith('dir'):
                    arg.completer = DirectoriesCompleter()
    add_config_args(cfg_group, cfg_docs.keys())

    subparsers = main_parser.add_subparsers(title='actions', dest='cmd', required=True)

    # Shared statement input parser
    input_parser = argparse.ArgumentParser(add_help=False)
    msg = 'Message files of one statement (constraints, witness and header), read from stdin if omitted.'
    input_parser.add_argument('input', nargs='*', help=msg, metavar='<message_file>').completer = FilesCompleter(message_files)
    input_parser.add_argument('--log', action='store_true', help='enable logging')

    subparsers.add_parser('validate', parents=[input_parser, config_parser],
                          help='Check that the witness satisfies the constraints.',
                          formatter_class=ShowSuppressedInHelpFormatter)
    subparsers.add_parser('print', parents=[input_parser, config_parser],
                          help='Print the circuit in text form and check the witness.',
                          formatter_class=ShowSuppressedInHelpFormatter)
    subparsers.add_parser('stats', parents=[input_parser, config_parser],
                          help='Print the header and the size of a statement.',
                          formatter_class=ShowSuppressedInHelpFormatter)

    # 'example' parser
    example_parser = subparsers.add_parser('example', parents=[config_parser],
                                           help='Write an example statement (x * x = y).',
                                           formatter_class=ShowSuppressedInHelpFormatter)
    msg = 'The directory to write the statement files to. Default: Current directory'
    example_parser.add_argument('-o', '--output', default=os.getcwd(), help=msg, metavar='<output_directory>').completer = DirectoriesCompleter()
    example_parser.add_argument('--setup', action='store_true', help='write only the circuit shape, without witness')
    example_parser.add_argument('-x', type=int, default=3, help='value of the public input x', metavar='<x>')

    # parse
    argcomplete.autocomplete(main_parser, always_complete_options=False)
    a = main_parser.parse_args()
    return a


def read_messages(filenames):
    from zkif.messages.reader import Messages
    messages = Messages()
    if not filenames:
        messages.push_message(sys.stdin.buffer.read())
    for f in filenames:
        messages.read_file(f)
    return messages


def write_example(output_dir: str, proving: bool, x: int):
    from zkif.messages.builder import FileSink
    from zkif.producer.exporter import StatementExporter
    from zkif.r1cs.constraint_system import LinearCombination

    sink = FileSink(output_dir)
    exporter = StatementExporter(sink, proving)
    x_var = exporter.alloc_input('x', x)
    y_var = exporter.alloc('y', lambda: exporter.get_value(x_var) ** 2)
    lc_x = LinearCombination([(x_var, 1)])
    exporter.enforce('x * x = y', lc_x, lc_x, LinearCombination([(y_var, 1)]))
    exporter.finish('example')
    return sink.written_files()


def main():
    # parse arguments
    a = parse_arguments()

    from zkif import my_logging
    from zkif.config import cfg
    from zkif.consumer.circuit import validate, synthesize
    from zkif.errors.exceptions import ZkifError, EncodingError, UnknownVariable, IncompleteWitness, \
        UnsatisfiedConstraint
    from zkif.my_logging.log_context import log_context

    # Load configuration files
    try:
        cfg.load_configuration_from_disk(a.config_file)
    except Exception as e:
        with fail_print():
            print(f"ERROR: Failed to load configuration files\n{e}")
        exit(42)

    # Support for overriding any user config setting via command line
    # The evaluation order for configuration loading is:
    # Default values in config.py -> Site config.json -> user config.json -> local config.json -> cmdline arguments
    # Settings defined at a later stage override setting values defined at an earlier stage
    override_dict = {}
    for name in vars(UserConfig):
        if name[0] != '_' and hasattr(a, name):
            val = getattr(a, name)
            if val is not None:
                override_dict[name] = val
    try:
        cfg.override_defaults(override_dict)
    except ValueError as e:
        with fail_print():
            print(f'ERROR: {e}')
        exit(42)

    error_codes = [(EncodingError, 3), (UnknownVariable, 4), (IncompleteWitness, 5), (UnsatisfiedConstraint, 6),
                   (ZkifError, 7)]

    if a.cmd == 'example':
        try:
            files = write_example(a.output, not a.setup, a.x)
        except (ZkifError, OSError) as e:
            with fail_print():
                print(f'ERROR: failed to write example statement\n{e}')
            exit(2)
        for f in files:
            print(f)
    elif a.cmd in ['validate', 'print', 'stats']:
        for f in a.input:
            if not os.path.exists(f):
                with fail_print():
                    print(f'Error: input file \'{f}\' does not exist')
                exit(1)

        # Enable logging
        if a.log:
            log_file = my_logging.get_log_file(filename=a.cmd)
            my_logging.prepare_logger(log_file)

        with log_context(a.cmd):
            try:
                messages = read_messages(a.input)
                if a.cmd == 'stats':
                    header = messages.header()
                    print(f'zkif {cfg.zkif_version}, wire format {cfg.wire_format_version}')
                    print(f'Header: {header}')
                    print(f'Constraints: {messages.num_constraints()} in {len(messages.constraint_messages)} messages')
                    print(f'Public variables: {len(messages.connection_variables() or [])}')
                    print(f'Private variables: {len(messages.used_private_variables() or [])}')
                    print(f'Witness: {"yes" if messages.has_witness() else "no"}')
                    cs = synthesize(messages, proving=False)
                    print(f'Host system: {cs.num_inputs} inputs, {cs.num_aux} auxiliary variables')
                else:
                    validate(messages, print_cs=a.cmd == 'print')
            except ZkifError as e:
                for exc_type, code in error_codes:
                    if isinstance(e, exc_type):
                        with fail_print():
                            print(f'{type(e).__name__}: {e}')
                        exit(code)
        if a.cmd != 'stats':
            with success_print():
                print('Satisfied: YES')
    else:
        raise NotImplementedError(a.cmd)


if __name__ == '__main__':
    main()
