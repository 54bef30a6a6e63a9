"""
Utility functions for the table to CSV exporter.
"""

import logging
from pathlib import Path
from typing import List, Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    if log_file:
        logging.basicConfig(
            level=log_level,
            format=format_string,
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler()
            ]
        )
    else:
        logging.basicConfig(level=log_level, format=format_string)


def validate_document_path(document_path: str) -> Path:
    """Validate that a document path exists and is a readable file."""
    path = Path(document_path)
    
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {document_path}")
        
    if not path.is_file():
        raise ValueError(f"Path is not a file: {document_path}")
        
    return path


def parse_index_list(text: str) -> List[int]:
    """Parse a comma separated list of 1-based table numbers into 0-based indices."""
    indices = []
    for part in text.split(','):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or int(part) < 1:
            raise ValueError(f"Invalid table number: {part!r}")
        indices.append(int(part) - 1)
    return indices
