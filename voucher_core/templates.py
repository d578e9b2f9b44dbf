from __future__ import annotations

from typing import Dict

from .models import PHASE_DUE, PHASE_OVERDUE_DAILY, PHASE_OVERDUE_WEEKLY, PHASE_PRE_DUE

DEFAULT_SITE_URL = "https://simpletk.co.kr/"
FALLBACK_APPLICANT_NAME = "고객"

MESSAGE_TEMPLATES: Dict[str, str] = {
    PHASE_PRE_DUE: (
        "안녕하세요, {name}님. 내일은 약정하신 날입니다.\n"
        "원활한 진행을 위해 신청 내역을 미리 확인해 주세요.\n"
        "{site_url}"
    ),
    PHASE_DUE: (
        "안녕하세요, {name}님. 오늘은 약정하신 날입니다.\n"
        "아래 링크를 통해 약정하신 상품권을 첨부해 주시면 신속히 처리해 드리겠습니다. 감사합니다.\n"
        "{site_url}"
    ),
    PHASE_OVERDUE_DAILY: (
        "안녕하세요, {name}님. 약정하신 상품권이 아직 첨부되지 않았습니다.\n"
        "지속적인 미이행 시, 이용 약관에 따라 더치트 등록 및 민·형사상 법적 절차가 진행될 수 있음을 "
        "엄중히 안내드립니다. 조속한 이행 부탁드립니다."
    ),
    PHASE_OVERDUE_WEEKLY: (
        "{name}님, 현재 귀하의 계약 불이행으로 인해 법적 조치 중입니다.\n"
        "형사 고소와 별개로, 본 계약 의무 불이행으로 발생하는 채권추심 및 민사 소송 비용"
        "(송달료, 인지대, 변호사 보수 등) 일체는 판매자인 귀하의 전액 부담으로 청구됩니다. "
        "더 큰 불이익이 발생하기 전에 해결하시기 바랍니다."
    ),
}


def render_message(phase: str, applicant_name: str, site_url: str = DEFAULT_SITE_URL) -> str:
    """Fill the template for ``phase``; raises KeyError for an unknown phase."""
    template = MESSAGE_TEMPLATES[phase]
    name = (applicant_name or "").strip() or FALLBACK_APPLICANT_NAME
    return template.format(name=name, site_url=site_url)
