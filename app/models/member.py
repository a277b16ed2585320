"""
member.py

회원 명단(Member) 모델 정의 파일.

업로드된 명단 파일의 한 행(row)이 한 레코드가 되며,
모든 레코드는 정확히 하나의 Dataset에 속한다 (dataset_id).
조회/검색/통계/내보내기는 항상 활성 Dataset의 레코드만 대상으로 한다.

member_number는 데이터셋 안에서도 중복을 막지 않는다.
(명단 파일에 중복 행이 있을 수 있으며, 조회 시 첫 번째 레코드를 사용)

"""

import datetime

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        Index("ix_members_dataset_id", "dataset_id"),
        Index("ix_members_member_number", "member_number"),
        Index("ix_members_expiry_date", "expiry_date"),
        Index("ix_members_school_name", "school_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dataset_id: Mapped[int] = mapped_column(Integer, ForeignKey("datasets.id", ondelete="CASCADE"), nullable=False)

    member_number: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    middle_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    home_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    # 회원 자격 정보 (membership_level = 파일의 "IEEE Status")
    membership_level: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    renew_year: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    expiry_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    # 소속 정보
    region: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    section: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    school_section: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    school_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    school_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    grade: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    gender: Mapped[str] = mapped_column(String(20), nullable=False, default="")

    # 쉼표로 구분된 소속 목록 (그대로 저장/표시)
    active_society_list: Mapped[str] = mapped_column(Text, nullable=False, default="")
    technical_community_list: Mapped[str] = mapped_column(Text, nullable=False, default="")
    technical_council_list: Mapped[str] = mapped_column(Text, nullable=False, default="")
    special_interest_group_list: Mapped[str] = mapped_column(Text, nullable=False, default="")
