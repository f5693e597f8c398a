from .auxiliary_variable import AuxiliaryVariable, LogStirlingCache
from .dirichlet_distribution_family import DirichletDistributionFamily
from .dirichlet_process_family import DirichletProcessFamily
from .emission_model import EmissionModel
from .gamma_poisson_family import GammaPoissonFamily
from .hierarchical_dirichlet_process import HierarchicalDirichletProcess
from .stick_breaking_process import StickBreakingProcess
from .variable import Variable
