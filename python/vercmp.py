#!/usr/bin/env python3
import sys
import logging
import argparse

import dpkg_version
import module_config
import module_index

logger_cli = logging.getLogger('CLI')

LOG_FORMAT = '%(asctime)s %(levelname).1s [%(name)-5s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def cmd_compare(args, conf) -> int:
    if dpkg_version.check_relation(args.a, args.op, args.b):
        return 0
    return 1


def cmd_check(args, conf) -> int:
    for raw in args.versions:
        v = dpkg_version.parse(raw)
        print(raw, '' if v.epoch is None else v.epoch,
              v.upstream_version, v.debian_revision or '', sep='\t')
    return 0


def cmd_sort(args, conf) -> int:
    versions = args.versions
    if not versions:
        versions = [line.strip() for line in sys.stdin if line.strip()]
    for v in sorted(map(dpkg_version.parse, versions), reverse=args.reverse):
        print(v)
    return 0


def cmd_newest(args, conf) -> int:
    paragraphs = module_index.read_packages(args.packages)
    for p in module_index.newest_packages(paragraphs, conf):
        print(p)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dpkg-vercmp', description='Parse and compare Debian package versions')
    parser.add_argument('-c', '--config', help='YAML config file')
    parser.add_argument('--log-level', help='override log_level from config')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('compare', help='exit 0 if A OP B holds, 1 otherwise')
    p.add_argument('a')
    p.add_argument('op', choices=sorted(dpkg_version.RELATIONS))
    p.add_argument('b')
    p.set_defaults(func=cmd_compare)

    p = sub.add_parser('check', help='validate versions and print their fields')
    p.add_argument('versions', nargs='+')
    p.set_defaults(func=cmd_check)

    p = sub.add_parser('sort', help='sort versions from arguments or stdin')
    p.add_argument('-r', '--reverse', action='store_true')
    p.add_argument('versions', nargs='*')
    p.set_defaults(func=cmd_sort)

    p = sub.add_parser('newest', help='newest stanza per package in a Packages file')
    p.add_argument('packages')
    p.set_defaults(func=cmd_newest)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stderr)
    conf = module_config.load(args.config)
    if args.log_level:
        conf['log_level'] = args.log_level
        conf = module_config.normalize(conf)
    logging.getLogger().setLevel(conf['log_level'])
    try:
        return args.func(args, conf)
    except (dpkg_version.VersionError, module_index.DuplicateVersionError,
            OSError) as e:
        logger_cli.error('%s', e)
        return 2


if __name__ == '__main__':
    sys.exit(main())
