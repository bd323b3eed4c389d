from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Text

from authgate.database import Base


class TotpEnrollmentEntry(Base):
    __tablename__ = "totp_enrollments"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    secret_encrypted = Column(Text, nullable=False)
    # ordered bcrypt hashes; shrinks as codes are used
    backup_codes_hashed = Column(JSON, nullable=False, default=list)
    enabled = Column(Boolean, nullable=False, default=False)
    enabled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
