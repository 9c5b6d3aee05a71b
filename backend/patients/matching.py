"""
患者匹配的纯算法部分：Soundex 语音编码 + Verhoeff 校验位。

不依赖 ORM，services.py 负责把这些算法套到数据库查询上。
"""

import re

# ── Verhoeff 表 ────────────────────────────────────────────────────────────

VERHOEFF_D = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 2, 3, 4, 0, 6, 7, 8, 9, 5),
    (2, 3, 4, 0, 1, 7, 8, 9, 5, 6),
    (3, 4, 0, 1, 2, 8, 9, 5, 6, 7),
    (4, 0, 1, 2, 3, 9, 5, 6, 7, 8),
    (5, 9, 8, 7, 6, 0, 4, 3, 2, 1),
    (6, 5, 9, 8, 7, 1, 0, 4, 3, 2),
    (7, 6, 5, 9, 8, 2, 1, 0, 4, 3),
    (8, 7, 6, 5, 9, 3, 2, 1, 0, 4),
    (9, 8, 7, 6, 5, 4, 3, 2, 1, 0),
)

VERHOEFF_INV = (0, 4, 3, 2, 1, 5, 6, 7, 8, 9)

VERHOEFF_P = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 5, 7, 6, 2, 8, 3, 0, 9, 4),
    (5, 8, 0, 3, 7, 9, 6, 1, 4, 2),
    (8, 9, 1, 6, 0, 4, 3, 5, 2, 7),
    (9, 4, 5, 3, 1, 2, 6, 8, 7, 0),
    (4, 2, 8, 6, 5, 7, 3, 9, 0, 1),
    (2, 7, 9, 3, 8, 0, 6, 4, 1, 5),
    (7, 0, 4, 6, 9, 1, 3, 2, 5, 8),
)

# ── Soundex 映射 ───────────────────────────────────────────────────────────

SOUNDEX_MAP = {
    'B': '1', 'F': '1', 'P': '1', 'V': '1',
    'C': '2', 'G': '2', 'J': '2', 'K': '2', 'Q': '2', 'S': '2', 'X': '2', 'Z': '2',
    'D': '3', 'T': '3',
    'L': '4',
    'M': '5', 'N': '5',
    'R': '6',
}

MRN_PREFIX = 'TRB'
MRN_RE = re.compile(r'^TRB-(\d{6})-(\d)$')
_NON_ALPHA_RE = re.compile(r'[^A-Z]')


def soundex(name: str) -> str:
    """
    标准 Soundex：首字母 + 3 位数字，不足补 0。

    - H / W 直接跳过，但不打断相邻同码合并
    - 元音会重置相邻判断，所以被元音隔开的两个同码辅音都会保留
    - 空串或没有字母 → "0000"
    """
    if not name or not name.strip():
        return '0000'

    upper = _NON_ALPHA_RE.sub('', name.upper())
    if not upper:
        return '0000'

    first = upper[0]
    result = first
    last_code = SOUNDEX_MAP.get(first, '')

    for ch in upper[1:]:
        if len(result) >= 4:
            break
        if ch in ('H', 'W'):
            continue

        code = SOUNDEX_MAP.get(ch)
        if code:
            if code != last_code:
                result += code
            last_code = code
        else:
            last_code = ''

    return (result + '000')[:4]


def verhoeff_check_digit(num: str) -> str:
    """Compute the Verhoeff check digit for a numeric string."""
    c = 0
    digits = [int(d) for d in num]
    # 从右往左处理，位置从 1 开始
    for i, digit in enumerate(reversed(digits), start=1):
        c = VERHOEFF_D[c][VERHOEFF_P[i % 8][digit]]
    return str(VERHOEFF_INV[c])


def generate_mrn_with_check_digit(sequence_num: int) -> str:
    """TRB-XXXXXX-C：6 位补零序号 + Verhoeff 校验位。"""
    padded = str(sequence_num).zfill(6)
    return f"{MRN_PREFIX}-{padded}-{verhoeff_check_digit(padded)}"


def validate_mrn_check_digit(mrn: str) -> bool:
    match = MRN_RE.match(mrn or '')
    if not match:
        return False
    numeric_part, provided = match.groups()
    return verhoeff_check_digit(numeric_part) == provided


def mrn_sequence(mrn: str) -> int | None:
    """从 TRB-XXXXXX-C 里取出序号；格式不对返回 None。"""
    match = MRN_RE.match(mrn or '')
    return int(match.group(1)) if match else None
