import logging
import functools
from typing import Callable, Iterable, Optional, Union

from internal_dpkg_version import ErrorKind, VersionError
import internal_dpkg_version

logger_ver = logging.getLogger('VER')

LESS, EQUAL, GREATER = -1, 0, 1

__all__ = ['Version', 'VersionError', 'ErrorKind', 'parse', 'to_string',
           'compare', 'compare_strings', 'check_relation', 'sort_key',
           'newest', 'comparable_ver', 'LESS', 'EQUAL', 'GREATER']


def _validate(epoch, upstream_version, debian_revision) -> None:
    if epoch is not None and (
            isinstance(epoch, bool) or not isinstance(epoch, int) or epoch < 0):
        raise VersionError(ErrorKind.INVALID_EPOCH, epoch)
    internal_dpkg_version.validate_upstream(
        upstream_version, debian_revision is not None)
    if debian_revision is not None:
        internal_dpkg_version.validate_revision(debian_revision)
    # without an epoch the first ':' would be read back as the epoch separator
    if epoch is None:
        if ':' in upstream_version:
            raise VersionError(ErrorKind.UPSTREAM_INVALID_CHARACTERS, upstream_version)
        if debian_revision is not None and ':' in debian_revision:
            raise VersionError(ErrorKind.REVISION_INVALID_CHARACTERS, debian_revision)


class Version(object):
    """ A parsed [epoch:]upstream_version[-debian_revision].

        Instances are immutable and always valid: the constructor checks
        every field, and the replace/map_* methods build a new, rechecked
        instance. == compares fields, use compare() for policy equality.
    """
    __slots__ = ('_epoch', '_upstream_version', '_debian_revision')

    def __init__(self, epoch: Optional[int], upstream_version: str,
                 debian_revision: Optional[str] = None):
        _validate(epoch, upstream_version, debian_revision)
        object.__setattr__(self, '_epoch', epoch)
        object.__setattr__(self, '_upstream_version', upstream_version)
        object.__setattr__(self, '_debian_revision', debian_revision)

    def __setattr__(self, name, value):
        raise AttributeError('Version is immutable')

    @classmethod
    def from_string(cls, raw: str) -> 'Version':
        return parse(raw)

    @property
    def epoch(self) -> Optional[int]:
        return self._epoch

    @property
    def upstream_version(self) -> str:
        return self._upstream_version

    @property
    def debian_revision(self) -> Optional[str]:
        return self._debian_revision

    def replace(self, **changes) -> 'Version':
        fields = {
            'epoch': self._epoch,
            'upstream_version': self._upstream_version,
            'debian_revision': self._debian_revision,
        }
        for k in changes:
            if k not in fields:
                raise TypeError('Version has no field %r' % k)
        fields.update(changes)
        return Version(**fields)

    def map_epoch(self, f: Callable[[int], int]) -> 'Version':
        if self._epoch is None:
            return self
        return self.replace(epoch=f(self._epoch))

    def map_upstream_version(self, f: Callable[[str], str]) -> 'Version':
        return self.replace(upstream_version=f(self._upstream_version))

    def map_debian_revision(self, f: Callable[[str], str]) -> 'Version':
        if self._debian_revision is None:
            return self
        return self.replace(debian_revision=f(self._debian_revision))

    def __str__(self):
        return to_string(self)

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, to_string(self))

    def _fields(self):
        return self._epoch, self._upstream_version, self._debian_revision

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._fields() == other._fields()

    def __ne__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._fields() != other._fields()

    def __hash__(self):
        return hash(self._fields())

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) < 0

    def __le__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) <= 0

    def __gt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) > 0

    def __ge__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) >= 0


def _rejected(raw: str, e: VersionError) -> VersionError:
    logger_ver.debug('Rejected %r: %s', raw, e.kind.name)
    return e


def parse(raw: str) -> Version:
    if not raw:
        raise _rejected(raw, VersionError(ErrorKind.EMPTY, raw))
    epoch = None
    head, sep, rest = raw.partition(':')
    if sep:
        try:
            epoch = internal_dpkg_version.validate_epoch(head)
        except VersionError as e:
            raise _rejected(raw, e)
    else:
        rest = raw
    if not rest:
        raise _rejected(raw, VersionError(ErrorKind.EMPTY, raw))
    upstream_version, sep, debian_revision = rest.rpartition('-')
    try:
        if sep:
            internal_dpkg_version.validate_upstream(upstream_version, True)
            internal_dpkg_version.validate_revision(debian_revision)
        else:
            upstream_version, debian_revision = rest, None
            internal_dpkg_version.validate_upstream(upstream_version, False)
    except VersionError as e:
        raise _rejected(raw, e)
    return Version(epoch, upstream_version, debian_revision)


def to_string(v: Version) -> str:
    s = v.upstream_version
    if v.epoch is not None:
        s = '%d:%s' % (v.epoch, s)
    if v.debian_revision is not None:
        s = '%s-%s' % (s, v.debian_revision)
    return s


VersionLike = Union[Version, str]


def _as_version(v: VersionLike) -> Version:
    if isinstance(v, Version):
        return v
    return parse(v)


def compare(a: VersionLike, b: VersionLike) -> int:
    a, b = _as_version(a), _as_version(b)
    epoch_a, epoch_b = a.epoch or 0, b.epoch or 0
    if epoch_a != epoch_b:
        return LESS if epoch_a < epoch_b else GREATER

    uv_delta = internal_dpkg_version.compare_body(
        a.upstream_version, b.upstream_version)
    if uv_delta != 0:
        return uv_delta
    return internal_dpkg_version.compare_body(
        a.debian_revision or '', b.debian_revision or '')


def compare_strings(a: str, b: str) -> int:
    return compare(parse(a), parse(b))


sort_key = functools.cmp_to_key(compare)


def newest(versions: Iterable[VersionLike]) -> VersionLike:
    return max(versions, key=sort_key)


RELATIONS = {
    '<<': lambda c: c < 0,
    '<=': lambda c: c <= 0,
    '=': lambda c: c == 0,
    '>=': lambda c: c >= 0,
    '>>': lambda c: c > 0,
    # obsolete forms, dpkg reads them as <= and >=
    '<': lambda c: c <= 0,
    '>': lambda c: c >= 0,
    'lt': lambda c: c < 0,
    'le': lambda c: c <= 0,
    'eq': lambda c: c == 0,
    'ne': lambda c: c != 0,
    'ge': lambda c: c >= 0,
    'gt': lambda c: c > 0,
}


def check_relation(a: VersionLike, relop: str, b: VersionLike) -> bool:
    try:
        rel = RELATIONS[relop]
    except KeyError:
        raise ValueError('unknown relation operator: %s' % relop) from None
    return rel(compare(a, b))


def comparable_ver(v: VersionLike) -> str:
    """ Return a string whose plain ordering matches compare().

        Handy for storing next to the version in a database and letting
        the database sort by it.
    """
    v = _as_version(v)
    return (internal_dpkg_version.comparable_digit(str(v.epoch or 0)) + '!' +
            internal_dpkg_version.comparable_body(v.upstream_version) + '!' +
            internal_dpkg_version.comparable_body(v.debian_revision or ''))
