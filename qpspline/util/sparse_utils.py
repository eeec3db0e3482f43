"""Module to convert dense matrices into compressed sparse column triplets."""

from dataclasses import dataclass
from typing import Tuple, cast

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike

from qpspline.types import FloatNDArray, IntNDArray


@dataclass(frozen=True)
class CSCMatrix:
    """
    Compressed sparse column (CSC) triplet of a real matrix.

    Attributes
    ----------
    data : FloatNDArray
        Nonzero values, grouped by column and sorted by row within a column.
    indices : IntNDArray
        Row index of each entry in data.
    indptr : IntNDArray
        Column pointers of length cols + 1. Entries of column j live in
        data[indptr[j]:indptr[j + 1]].
    shape : tuple of int
        (rows, cols) of the original dense matrix.
    """

    data: FloatNDArray
    indices: IntNDArray
    indptr: IntNDArray
    shape: Tuple[int, int]

    @property
    def nnz(self) -> int:
        """Return the number of stored entries."""
        return int(self.data.size)

    @classmethod
    def from_dense(cls, matrix: ArrayLike) -> "CSCMatrix":
        """Alias for :func:`dense_to_csc`."""
        return dense_to_csc(matrix)

    def to_scipy(self) -> sp.csc_array:
        """Return the triplet as a scipy ``csc_array`` (no copy of the buffers)."""
        return sp.csc_array((self.data, self.indices, self.indptr), shape=self.shape)

    def todense(self) -> FloatNDArray:
        """Return the dense matrix represented by this triplet."""
        return csc_to_dense(self)


def dense_to_csc(matrix: ArrayLike) -> CSCMatrix:
    """
    Convert a dense matrix into CSC triplets.

    Columns are scanned left to right and rows top to bottom, so row indices
    are ascending inside every column. A value is stored whenever it is not
    exactly zero; there is no tolerance, since the sparsity of the QP is
    structural.

    Parameters
    ----------
    matrix : ArrayLike
        Two dimensional real matrix. Zero rows or zero columns are allowed
        and give an empty triplet.

    Returns
    -------
    CSCMatrix
        The compressed sparse column representation of matrix.

    Raises
    ------
    ValueError
        If matrix is not two dimensional.
    """
    dense = np.asarray(matrix, dtype=float)
    if dense.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got an array with ndim={dense.ndim}.")
    rows, cols = dense.shape

    # transpose so that a C-order scan walks the columns of the original
    by_column = dense.T
    mask = by_column != 0.0
    col_idx, row_idx = np.nonzero(mask)

    data = np.ascontiguousarray(by_column[mask], dtype=float)
    indices = row_idx.astype(np.intp)
    indptr = np.zeros(cols + 1, dtype=np.intp)
    np.cumsum(np.bincount(col_idx, minlength=cols), out=indptr[1:])

    return CSCMatrix(data=data, indices=indices, indptr=indptr, shape=(rows, cols))


def csc_to_dense(csc: CSCMatrix) -> FloatNDArray:
    """
    Rebuild the dense matrix stored in a CSC triplet.

    Parameters
    ----------
    csc : CSCMatrix
        Triplet produced by :func:`dense_to_csc`.

    Returns
    -------
    FloatNDArray
        Dense matrix of shape csc.shape.
    """
    rows, cols = csc.shape
    dense = np.zeros((rows, cols), dtype=float)
    for j in range(cols):
        start, stop = csc.indptr[j], csc.indptr[j + 1]
        dense[csc.indices[start:stop], j] = csc.data[start:stop]
    return cast(FloatNDArray, dense)
