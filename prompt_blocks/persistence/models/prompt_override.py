"""Prompt block and modifier override models."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from prompt_blocks.persistence.database import Base


class PromptBlockOverride(Base):
    """Field-level patch over a built-in prompt block.

    Only columns that are set replace the registry default. ``variants`` holds
    a partial context -> text mapping merged key by key over the default
    variants; an empty string for a context clears that context.
    """

    __tablename__ = "prompt_block_overrides"

    id = Column(Integer, primary_key=True, index=True)
    block_id = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    variants = Column(JSON, nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<PromptBlockOverride(id={self.id}, block_id={self.block_id})>"


class PromptModifierOverride(Base):
    """Field-level patch over a built-in mode or domain modifier."""

    __tablename__ = "prompt_modifier_overrides"

    id = Column(Integer, primary_key=True, index=True)
    modifier_id = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<PromptModifierOverride(id={self.id}, modifier_id={self.modifier_id})>"
