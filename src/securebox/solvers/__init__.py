from securebox.solvers.base import Box, Solver, UnsolvableBoxError
from securebox.solvers.gauss_jordan import GaussJordanSolver, open_box
