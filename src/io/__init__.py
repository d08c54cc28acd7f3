"""I/O utilities for scholarship batches, profiles and match artifacts."""

from src.io.records import load_profile, load_scholarships_df, write_json_atomic

__all__ = ["load_profile", "load_scholarships_df", "write_json_atomic"]
