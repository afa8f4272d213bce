import re
import enum
import string

_epoch = re.compile(r'[0-9]+')
_upstream_with_revision = re.compile(r'[A-Za-z0-9.+:~-]*')
_upstream_without_revision = re.compile(r'[A-Za-z0-9.+:~]*')
_revision = re.compile(r'[A-Za-z0-9.+:~]*')
_non_digit = re.compile(r'[^0-9]*')
_digit = re.compile(r'[0-9]*')


class ErrorKind(enum.Enum):
    EMPTY = 'Version is empty.'
    INVALID_EPOCH = 'Epochs must be numeric.'
    EMPTY_UPSTREAM = 'Upstream version is empty.'
    UPSTREAM_STARTS_WITH_NON_DIGIT = 'Upstream version must start with a digit.'
    UPSTREAM_INVALID_CHARACTERS = 'Upstream version contains invalid characters.'
    EMPTY_REVISION = 'Debian revision is empty.'
    REVISION_INVALID_CHARACTERS = 'Debian revision contains invalid characters.'


class VersionError(ValueError):
    def __init__(self, kind: ErrorKind, value=None):
        self.kind = kind
        self.value = value
        if value is None:
            super().__init__(kind.value)
        else:
            super().__init__('%s (%r)' % (kind.value, value))


def validate_epoch(s: str) -> int:
    if _epoch.fullmatch(s) is None:
        raise VersionError(ErrorKind.INVALID_EPOCH, s)
    return int(s)


def validate_upstream(s: str, with_revision: bool) -> None:
    """ Check an upstream version candidate.
        A '-' is only legal when a revision was split off after it, otherwise
        re-parsing the upstream version alone would find a revision in it.
    """
    if not isinstance(s, str):
        raise VersionError(ErrorKind.UPSTREAM_INVALID_CHARACTERS, s)
    if not s:
        raise VersionError(ErrorKind.EMPTY_UPSTREAM, s)
    if s[0] not in string.digits:
        raise VersionError(ErrorKind.UPSTREAM_STARTS_WITH_NON_DIGIT, s)
    r = _upstream_with_revision if with_revision else _upstream_without_revision
    if r.fullmatch(s) is None:
        raise VersionError(ErrorKind.UPSTREAM_INVALID_CHARACTERS, s)


def validate_revision(s: str) -> None:
    if not isinstance(s, str):
        raise VersionError(ErrorKind.REVISION_INVALID_CHARACTERS, s)
    if not s:
        raise VersionError(ErrorKind.EMPTY_REVISION, s)
    if _revision.fullmatch(s) is None:
        raise VersionError(ErrorKind.REVISION_INVALID_CHARACTERS, s)


def _cut(ver: str, r):
    sec = r.match(ver).group()
    return sec, ver[len(sec):]


def _order(c: str) -> int:
    # '~' < end of run < letters < everything else
    if c == '~':
        return -1
    if c in string.ascii_letters:
        return ord(c)
    return ord(c) + 256


def _compare_non_digit(a: str, b: str) -> int:
    for i in range(max(len(a), len(b))):
        oa = _order(a[i]) if i < len(a) else 0
        ob = _order(b[i]) if i < len(b) else 0
        if oa != ob:
            return -1 if oa < ob else 1
    return 0


def compare_body(body_a: str, body_b: str) -> int:
    """ Compare two upstream versions or two revisions.

        Both strings are eaten as alternating runs: a run of non-digits,
        compared with _order, then a run of digits, compared as a number
        (an empty run counts as 0). The first run that differs decides.
    """
    while body_a or body_b:
        sec_a, body_a = _cut(body_a, _non_digit)
        sec_b, body_b = _cut(body_b, _non_digit)
        delta = _compare_non_digit(sec_a, sec_b)
        if delta:
            return delta
        sec_a, body_a = _cut(body_a, _digit)
        sec_b, body_b = _cut(body_b, _digit)
        num_a = int(sec_a) if sec_a else 0
        num_b = int(sec_b) if sec_b else 0
        if num_a != num_b:
            return -1 if num_a < num_b else 1
    return 0


# Every character a validated version may hold in a non-digit run, in
# comparison order. '|' stands for the end of a run.
_NON_DIGIT_TABLE = '~|' + string.ascii_uppercase + string.ascii_lowercase + '+-.:'
_MAX_DIGITS = ord('~') - ord('0') + 1


def comparable_digit(i: str) -> str:
    clean_number = i.lstrip('0') or '0'
    length = len(clean_number)
    if length > _MAX_DIGITS:
        raise ValueError('number too long for a comparable key: %s' % i)
    return chr(ord('0') + (length - 1)) + clean_number


def _comparable_non_digit(s: str) -> str:
    return ''.join(chr(ord('0') + _NON_DIGIT_TABLE.index(c)) for c in s + '|')


_END_OF_RUN = _comparable_non_digit('')
_ZERO = comparable_digit('')


def comparable_body(body: str) -> str:
    """ Encode a body so that plain string order matches compare_body. """
    pairs = []
    while body:
        nd, body = _cut(body, _non_digit)
        d, body = _cut(body, _digit)
        pairs.append(_comparable_non_digit(nd) + comparable_digit(d))
    # A missing tail compares like an endless run of ('', 0) pairs
    while pairs and pairs[-1] == _END_OF_RUN + _ZERO:
        pairs.pop()
    return ''.join(pairs) + _END_OF_RUN + _ZERO + _END_OF_RUN
