#!/usr/bin/env python3
"""
A jagged two-level array. The same container stores time series (one row per series)
and the growing matrices of the beam sampler (one row per latent state).
"""
# Support typehinting.
from __future__ import annotations

import copy
import typing

import numpy

T = typing.TypeVar("T")


class RaggedMatrix(typing.Generic[T]):
    """An ordered sequence of independently sized rows."""

    def __init__(self, rows: typing.Optional[typing.Iterable[typing.Iterable[T]]] = None) -> None:
        """Create a ragged matrix, empty unless rows are given.

        Args:
            rows: Optional rows to copy into the matrix.
        """
        self._rows: typing.List[typing.List[T]] = [] if rows is None else [list(row) for row in rows]

    @classmethod
    def uniform(cls, rows: int, cols: int, fill: typing.Any = 0) -> "RaggedMatrix":
        """Create a matrix with every row of the same length.

        Args:
            rows: Number of rows.
            cols: Length of every row.
            fill: Initial value of every element.

        Returns:
            A new RaggedMatrix.
        """
        return cls.from_sizes([cols] * rows, fill=fill)

    @classmethod
    def from_sizes(cls, sizes: typing.Iterable[int], fill: typing.Any = 0) -> "RaggedMatrix":
        """Create a matrix with row lengths given by a size vector.

        Args:
            sizes: The length of each row.
            fill: Initial value of every element.

        Returns:
            A new RaggedMatrix.
        """
        return cls([fill] * size for size in sizes)

    @classmethod
    def from_rows(cls, rows: typing.Iterable[typing.Iterable[T]]) -> "RaggedMatrix":
        return cls(rows)

    def __getitem__(self, i: int) -> typing.List[T]:
        return self._rows[i]

    def __setitem__(self, i: int, row: typing.Iterable[T]) -> None:
        self._rows[i] = list(row)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> typing.Iterator[typing.List[T]]:
        return iter(self._rows)

    def __eq__(self, other) -> bool:
        if isinstance(other, RaggedMatrix):
            return self._rows == other._rows
        return NotImplemented

    def __repr__(self) -> str:
        return "<RaggedMatrix, sizes {}>".format(self.sizes())

    def append(self, row: typing.Iterable[T]) -> None:
        """Add a new row to the end of the matrix.

        Args:
            row: The elements of the new row.
        """
        self._rows.append(list(row))

    def sizes(self) -> typing.List[int]:
        """The length of every row, in order.

        Returns:
            A list with one entry per row.
        """
        return [len(row) for row in self._rows]

    def row_sum(self, i: int) -> T:
        return sum(self._rows[i])

    def column_sum(self, j: int) -> T:
        """Sum element j of every row long enough to contain it.

        Args:
            j: The column index.

        Returns:
            The column total.
        """
        return sum(row[j] for row in self._rows if j < len(row))

    def copy(self) -> "RaggedMatrix":
        return RaggedMatrix(copy.deepcopy(self._rows))

    def to_array(self) -> numpy.ndarray:
        """Convert a rectangular matrix to a numpy array.

        Returns:
            A two dimensional array.

        Raises:
            ValueError: If the rows have different lengths.
        """
        if len(set(self.sizes())) > 1:
            raise ValueError("Only rectangular matrices can be converted to arrays.")
        return numpy.array(self._rows)
