"""
USCDI v3 人口学编码值集。

性别认同 / 性取向 / 种族 / 民族 / 首选语言的标准编码，
供 GET /api/v1/demographics/codes/ 返回给客户端，也供 intake 校验 coding 的 system。
"""

from dataclasses import asdict, dataclass

SNOMED = 'http://snomed.info/sct'
NULL_FLAVOR = 'http://terminology.hl7.org/CodeSystem/v3-NullFlavor'
CDC_RACE_ETHNICITY = 'urn:oid:2.16.840.1.113883.6.238'


@dataclass(frozen=True)
class DemographicsCode:
    code: str
    system: str
    display: str


GENDER_IDENTITY_CODES = (
    DemographicsCode('446151000124109', SNOMED, 'Identifies as male gender'),
    DemographicsCode('446141000124107', SNOMED, 'Identifies as female gender'),
    DemographicsCode('33791000087105', SNOMED, 'Identifies as nonbinary gender'),
    DemographicsCode('OTH', NULL_FLAVOR, 'Other'),
    DemographicsCode('ASKU', NULL_FLAVOR, 'Asked but unknown'),
    DemographicsCode('UNK', NULL_FLAVOR, 'Unknown'),
)

SEXUAL_ORIENTATION_CODES = (
    DemographicsCode('38628009', SNOMED, 'Lesbian, gay, or homosexual'),
    DemographicsCode('20430005', SNOMED, 'Heterosexual'),
    DemographicsCode('42035005', SNOMED, 'Bisexual'),
    DemographicsCode('OTH', NULL_FLAVOR, 'Other'),
    DemographicsCode('ASKU', NULL_FLAVOR, 'Asked but unknown'),
    DemographicsCode('UNK', NULL_FLAVOR, 'Unknown'),
)

# CDC Race & Ethnicity Code Set（OMB 分类）
RACE_CODES = (
    DemographicsCode('1002-5', CDC_RACE_ETHNICITY, 'American Indian or Alaska Native'),
    DemographicsCode('2028-9', CDC_RACE_ETHNICITY, 'Asian'),
    DemographicsCode('2054-5', CDC_RACE_ETHNICITY, 'Black or African American'),
    DemographicsCode('2076-8', CDC_RACE_ETHNICITY, 'Native Hawaiian or Other Pacific Islander'),
    DemographicsCode('2106-3', CDC_RACE_ETHNICITY, 'White'),
    DemographicsCode('ASKU', NULL_FLAVOR, 'Asked but unknown'),
    DemographicsCode('UNK', NULL_FLAVOR, 'Unknown'),
)

ETHNICITY_CODES = (
    DemographicsCode('2135-2', CDC_RACE_ETHNICITY, 'Hispanic or Latino'),
    DemographicsCode('2186-5', CDC_RACE_ETHNICITY, 'Not Hispanic or Latino'),
    DemographicsCode('ASKU', NULL_FLAVOR, 'Asked but unknown'),
    DemographicsCode('UNK', NULL_FLAVOR, 'Unknown'),
)

# BCP-47，美国最常见的语言
LANGUAGE_CODES = {
    'en': 'English',
    'es': 'Spanish',
    'zh': 'Chinese',
    'vi': 'Vietnamese',
    'ko': 'Korean',
    'tl': 'Tagalog',
    'ar': 'Arabic',
    'fr': 'French',
    'de': 'German',
    'ru': 'Russian',
    'ja': 'Japanese',
    'nv': 'Navajo',
    'chr': 'Cherokee',
    'oj': 'Ojibwe',
    'dak': 'Dakota',
}

# intake 校验 coding.system 时用
KNOWN_CODE_SYSTEMS = frozenset({SNOMED, NULL_FLAVOR, CDC_RACE_ETHNICITY})


def all_code_sets():
    return {
        'genderIdentity': [asdict(c) for c in GENDER_IDENTITY_CODES],
        'sexualOrientation': [asdict(c) for c in SEXUAL_ORIENTATION_CODES],
        'race': [asdict(c) for c in RACE_CODES],
        'ethnicity': [asdict(c) for c in ETHNICITY_CODES],
        'language': [{'code': k, 'display': v} for k, v in LANGUAGE_CODES.items()],
    }
