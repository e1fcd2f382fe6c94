"""Data models for grid generation."""

from typing import Dict, List, NamedTuple, Sequence
from pydantic import BaseModel, Field


class Cell(NamedTuple):
    """A grid coordinate."""
    row: int
    col: int


class GridCell(BaseModel):
    """A single lettered cell of the grid."""
    letter: str = Field("", max_length=1)
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class GridResult(BaseModel):
    """Result of grid generation."""
    size: int
    grid: List[List[GridCell]] = Field(default_factory=list)
    placements: Dict[str, List[Cell]] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        """True for the blank grid returned when packing gave up."""
        return not self.grid or self.grid[0][0].letter == ""

    def is_complete(self, words: Sequence[str]) -> bool:
        """Check that every requested word has a non-empty placement."""
        return all(self.placements.get(word) for word in words)

    def letters(self) -> List[List[str]]:
        """The grid as rows of plain letters."""
        return [[cell.letter for cell in row] for row in self.grid]
