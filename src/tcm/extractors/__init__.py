# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extractor package for the test coverage mapper."""

from tcm.extractors.java import JavaMethodExtractor, JavaTestMethodExtractor

__all__ = ["JavaMethodExtractor", "JavaTestMethodExtractor"]
