from .sparse_utils import CSCMatrix, csc_to_dense, dense_to_csc

__all__ = ['CSCMatrix', 'dense_to_csc', 'csc_to_dense']
