#!/usr/bin/env python3
"""
Beam sampling for non-parametric Bayesian hidden Markov models. The hierarchical
Dirichlet process prior allows an unbounded number of latent states, and the beam
sampler instantiates only as many of them as each sweep requires.
"""

import warnings

from .bayesian_model import (
    AuxiliaryVariable,
    DirichletDistributionFamily,
    DirichletProcessFamily,
    EmissionModel,
    GammaPoissonFamily,
    HierarchicalDirichletProcess,
    LogStirlingCache,
    StickBreakingProcess,
    Variable,
)
from .exceptions import DegenerateDistributionError, StateExpansionError
from .hdphmm import HDPHMM
from .ragged import RaggedMatrix

warnings.warn("beam_hdphmm is in beta testing and future versions may behave differently")
