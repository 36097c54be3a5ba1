#!/usr/bin/env python3

import sys
import argparse
import json
import logging
import random

import logzero
from logzero import logger

from chaosspace.common import false_list, true_list
from chaosspace.errors import ActionSpaceError
from chaosspace.faults import FAULT_TYPES, Injection
from chaosspace.groundtruth import as_dict
from chaosspace.space import ActionSpace
from chaosspace.systems import SystemRegistry, load_systems
from chaosspace.topology.manager import CacheManager
from chaosspace.topology.provider import JsonTopologyProvider

RECORD_TYPES = dict([(t.__name__, t) for t in FAULT_TYPES] +
                    [(Injection.__name__, Injection)])


# Command-line Argument Parsing
def str2bool(v):
    if v.lower() in true_list:
        return True
    elif v.lower() in false_list:
        return False
    else:
        raise argparse.ArgumentTypeError(
            'Boolean value (yes, no, true, false, y, n, 1, or 0) expected.')


LOG_LEVEL_HELP = """Logging level.
                      [LOG-LEVEL]: notset, debug, info, warning, error, critical
                      Default: warning"""
levels = {
    'notset': logging.NOTSET,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}


def log_level(v):
    if v.lower() in levels.keys():
        return levels[v.lower()]
    else:
        raise argparse.ArgumentTypeError(
            'Expected one of the following: {}.'.format(
                 ', '.join(levels.keys())))


def record_type(v):
    if v not in RECORD_TYPES:
        raise argparse.ArgumentTypeError(
            'Unknown fault {}. Expected one of the following: {}.'.format(
                v, ', '.join(sorted(RECORD_TYPES))))
    return RECORD_TYPES[v]


def action_vector(v):
    try:
        vector = json.loads(v)
    except ValueError as e:
        raise argparse.ArgumentTypeError('Invalid action vector. Reason: '
                                         '{}'.format(e))
    if not isinstance(vector, list):
        raise argparse.ArgumentTypeError('Invalid action vector. Expected a '
                                         'JSON list of integers.')
    return vector


def program_args():
    parser = argparse.ArgumentParser(
        description='Derive, sample and decode fault-injection action spaces.')

    parser.add_argument('topology', help='A JSON file mapping each system to ' \
                        'its topology document (endpoints, rpc operations, ' \
                        'database operations, methods, containers and ' \
                        'workload labels).')

    parser.add_argument('system', help='The target system, e.g. ts.')

    parser.add_argument('--namespace', help='The namespace to resolve ' \
                        'workloads and containers in. Default: the ' \
                        'system\'s first namespace (e.g. ts0).', default=None)

    parser.add_argument('--systems-file', help='A JSON list of {"name": ..., ' \
                        '"namespace_prefix": ...} objects overriding the ' \
                        'built-in system list. Default: None', default=None)

    parser.add_argument('-f', '--fault', type=record_type, help='The fault ' \
                        'record to work with. Default: Injection (every ' \
                        'fault)', default=Injection)

    parser.add_argument('--decode', help='A file holding a populated node ' \
                        'wire-map to decode, or - for stdin. Default: None',
                        default=None)

    parser.add_argument('--vector', type=action_vector, help='A JSON list of ' \
                        'integers to decode, e.g. \'[0, 5, 0, 1]\'. ' \
                        'Default: None', default=None)

    parser.add_argument('--sample', type=int, help='Sample a random point ' \
                        'with the given seed and decode it. Default: None',
                        default=None)

    parser.add_argument('-g', '--groundtruth', action='store_true',
                        default=False, help='Include the groundtruth of a ' \
                        'decoded record.')

    parser.add_argument('-c', '--compact', type=str2bool, help='Emit compact ' \
                        'wire-maps (drop unset values and the name and range ' \
                        'of populated nodes). Default: N Options (case ' \
                        'insensitive): y, yes, true, 1, n, no, false, 0',
                        nargs='?', const='Y', default='N')

    parser.add_argument('-l', '--log-level', type=log_level, nargs='?',
                        const=logging.INFO, default=logging.WARNING,
                        help=LOG_LEVEL_HELP)

    return parser


def parse_args(argv=None, parser=program_args()):
    args = parser.parse_args(args=argv)
    # argparse does not apply 'type' to const
    if isinstance(args.compact, str):
        args.compact = str2bool(args.compact)
    return args


def init(args):
    logzero.loglevel(args.log_level)
    logger.debug("Initializing...")
    logger.debug("args: %s", args)


def build_space(args):
    systems = load_systems(args.systems_file) if args.systems_file \
        else SystemRegistry()
    manager = CacheManager(JsonTopologyProvider(args.topology))
    return ActionSpace(manager, systems)


def read_wire_map(source):
    if source == '-':
        return json.load(sys.stdin)
    with open(source, 'r') as wirefile:
        return json.load(wirefile)


def describe(space, args, node):
    record = space.decode(node, args.system, args.namespace,
                          record_type=args.fault)
    output = {
        'node': space.to_map(node, exclude_unset=args.compact),
        'config': space.display(record, args.namespace),
    }
    if isinstance(record, Injection):
        output['fault'] = record.alternative
    if args.groundtruth:
        output['groundtruth'] = as_dict(space.groundtruth(record,
                                                          args.namespace))
    return output


def run(args, out=sys.stdout):
    space = build_space(args)
    if args.decode is not None:
        output = describe(space, args,
                          space.from_map(read_wire_map(args.decode)))
    else:
        template = space.schema(args.fault, args.system, args.namespace)
        if args.vector is not None:
            node = space.vector_to_node(args.fault, template, args.vector)
            output = describe(space, args, node)
        elif args.sample is not None:
            node = space.random_node(args.fault, template,
                                     random.Random(args.sample))
            output = describe(space, args, node)
        else:
            output = space.to_map(template, exclude_unset=args.compact)
    json.dump(output, out, indent=2, sort_keys=True)
    out.write("\n")


def main(args):
    try:
        init(args)
    except Exception:
        logger.error('Unable to initialize script')
        raise

    try:
        run(args)
    except ActionSpaceError as e:
        logger.error("%s: %s", type(e).__name__, e)
        if e.retryable:
            logger.info("The topology may be temporarily unavailable; retry "
                        "later.")
        return 1
    except (OSError, ValueError) as e:
        logger.error("Unable to read input: %s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main(parse_args()))
