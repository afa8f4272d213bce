import logging
from typing import Dict, Iterable, List, Tuple

from debian import deb822

import dpkg_version
from module_config import VCConf

logger_index = logging.getLogger('INDEX')


class DuplicateVersionError(Exception):
    def __init__(self, package: str, architecture: str, old: str, new: str):
        self.package = package
        self.architecture = architecture
        super().__init__('%s (%s): %s and %s are the same version' % (
            package, architecture, old, new))


def read_packages(path: str) -> List[deb822.Packages]:
    with open(path, 'r', encoding='utf-8') as f:
        return list(deb822.Packages.iter_paragraphs(f, use_apt_pkg=False))


def newest_packages(paragraphs: Iterable[deb822.Packages],
                    conf: VCConf) -> List[deb822.Packages]:
    """ Keep the newest stanza for every (Package, Architecture) pair.
        The result keeps the order in which the pairs were first seen.
    """
    best = {}  # type: Dict[Tuple[str, str], Tuple[dpkg_version.Version, deb822.Packages]]
    for p in paragraphs:
        package = p.get('Package')
        version = p.get('Version')
        if not package or not version:
            logger_index.warning('SKIP   stanza without Package or Version')
            continue
        architecture = p.get('Architecture', 'all')
        try:
            ver = dpkg_version.parse(version)
        except dpkg_version.VersionError as e:
            if conf['on_invalid'] == 'fail':
                raise
            logger_index.error('BAD    %s %s %s: %s',
                               architecture, package, version, e)
            continue
        key = (package, architecture)
        if key not in best:
            logger_index.info('NEW    %s %s %s', architecture, package, version)
            best[key] = (ver, p)
            continue
        oldver = best[key][0]
        vercomp = dpkg_version.compare(oldver, ver)
        if vercomp == dpkg_version.LESS:
            logger_index.info('NEWER  %s %s %s >> %s',
                              architecture, package, version, oldver)
            best[key] = (ver, p)
        elif vercomp == dpkg_version.GREATER:
            logger_index.info('OLD    %s %s %s', architecture, package, version)
        else:
            logger_index.error('DUP    %s %s %s == %s',
                               architecture, package, oldver, version)
            if conf['on_duplicate'] == 'fail':
                raise DuplicateVersionError(package, architecture, str(oldver), version)
    return [p for _, p in best.values()]