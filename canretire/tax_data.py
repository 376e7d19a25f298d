"""Canadian tax, benefit and RRIF reference data for canretire."""

from __future__ import annotations

from typing import Final

BASE_TAX_YEAR: Final[int] = 2025
DEFAULT_BRACKET_INFLATION: Final[float] = 0.02
CAPITAL_GAINS_INCLUSION_RATE: Final[float] = 0.5

PROVINCE_CODES: Final[set[str]] = {
    "AB",
    "BC",
    "MB",
    "NB",
    "NL",
    "NS",
    "NT",
    "NU",
    "ON",
    "PE",
    "QC",
    "SK",
    "YT",
}

# Brackets are (upper_bound, marginal_rate). Upper bound None means infinity.
FEDERAL_BRACKETS: Final[dict[int, list[tuple[float | None, float]]]] = {
    2025: [
        (57_375.0, 0.15),
        (114_750.0, 0.205),
        (177_882.0, 0.26),
        (253_414.0, 0.29),
        (None, 0.33),
    ],
}

PROVINCIAL_BRACKETS: Final[dict[int, dict[str, list[tuple[float | None, float]]]]] = {
    2025: {
        "ON": [
            (52_886.0, 0.0505),
            (105_775.0, 0.0915),
            (150_000.0, 0.1116),
            (220_000.0, 0.1216),
            (None, 0.1316),
        ],
        "BC": [
            (49_279.0, 0.0506),
            (98_560.0, 0.077),
            (113_158.0, 0.105),
            (137_407.0, 0.1229),
            (186_306.0, 0.147),
            (259_829.0, 0.168),
            (None, 0.205),
        ],
        "AB": [
            (60_000.0, 0.08),
            (151_234.0, 0.10),
            (181_481.0, 0.12),
            (241_974.0, 0.13),
            (362_961.0, 0.14),
            (None, 0.15),
        ],
        "SK": [
            (53_463.0, 0.105),
            (152_750.0, 0.125),
            (None, 0.145),
        ],
        "MB": [
            (47_000.0, 0.108),
            (100_000.0, 0.1275),
            (None, 0.174),
        ],
        "NS": [
            (30_507.0, 0.0879),
            (61_015.0, 0.1495),
            (95_883.0, 0.1667),
            (154_650.0, 0.175),
            (None, 0.21),
        ],
        "QC": [
            (53_255.0, 0.14),
            (106_495.0, 0.19),
            (129_590.0, 0.24),
            (None, 0.2575),
        ],
    },
}

# Credit amounts are converted to tax at the jurisdiction's lowest bracket rate.
FEDERAL_CREDITS: Final[dict[int, dict[str, float]]] = {
    2025: {
        "basic_personal_amount": 16_129.0,
        "age_amount": 9_028.0,
        "age_amount_threshold": 45_522.0,
        "age_amount_reduction_rate": 0.15,
    },
}

PROVINCIAL_CREDITS: Final[dict[int, dict[str, dict[str, float]]]] = {
    2025: {
        "ON": {
            "basic_personal_amount": 12_747.0,
            "age_amount": 6_223.0,
            "age_amount_threshold": 46_330.0,
            "age_amount_reduction_rate": 0.15,
        },
        "BC": {
            "basic_personal_amount": 12_932.0,
            "age_amount": 5_799.0,
            "age_amount_threshold": 43_169.0,
            "age_amount_reduction_rate": 0.15,
        },
        "AB": {
            "basic_personal_amount": 22_323.0,
            "age_amount": 6_221.0,
            "age_amount_threshold": 46_308.0,
            "age_amount_reduction_rate": 0.15,
        },
        "SK": {"basic_personal_amount": 19_491.0},
        "MB": {"basic_personal_amount": 15_780.0},
        "NS": {"basic_personal_amount": 11_744.0},
        "QC": {"basic_personal_amount": 18_571.0},
    },
}

BENEFIT_AMOUNTS: Final[dict[int, dict[str, float]]] = {
    2025: {
        "cpp_max_monthly_at_65": 1_433.0,
        "oas_max_monthly_at_65": 727.67,
        "ympe": 71_300.0,
        "oas_clawback_threshold": 93_454.0,
        "oas_clawback_upper": 151_668.0,
        "oas_clawback_rate": 0.15,
    },
}

RRIF_FIRST_AGE: Final[int] = 55
RRIF_CONVERSION_AGE: Final[int] = 71
RRIF_TERMINAL_AGE: Final[int] = 95

# CRA prescribed minimum withdrawal factors; ages >= 95 use the terminal rate.
RRIF_MINIMUM_PERCENTAGES: Final[dict[int, float]] = {
    55: 0.0286,
    56: 0.0294,
    57: 0.0303,
    58: 0.0313,
    59: 0.0323,
    60: 0.0333,
    61: 0.0345,
    62: 0.0357,
    63: 0.0370,
    64: 0.0385,
    65: 0.0400,
    66: 0.0417,
    67: 0.0435,
    68: 0.0455,
    69: 0.0476,
    70: 0.0500,
    71: 0.0528,
    72: 0.0540,
    73: 0.0553,
    74: 0.0567,
    75: 0.0582,
    76: 0.0598,
    77: 0.0617,
    78: 0.0636,
    79: 0.0658,
    80: 0.0682,
    81: 0.0708,
    82: 0.0738,
    83: 0.0771,
    84: 0.0808,
    85: 0.0851,
    86: 0.0899,
    87: 0.0955,
    88: 0.1021,
    89: 0.1099,
    90: 0.1192,
    91: 0.1306,
    92: 0.1449,
    93: 0.1634,
    94: 0.1879,
    95: 0.2000,
}
