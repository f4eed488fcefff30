from .carpenter import Carpenter, carpenter
from .charm import Charm, charm
from .eclat import Eclat, eclat
from .fpclose import FPClose, fpclose
from .fpgrowth import FPGrowth, fpgrowth
from .fpmax import FPMax, fpmax
from .fptree import FPTree
from .genmax import GenMax, genmax
from .lcm import LCM, lcm
from .mine import AutoMiner, mine, mine_closed, mine_frequent, mine_maximal
from .model import BaseModel, ItemsetMiner, Miner
from .recovery import recover_closed, recover_maximal
from .results import ResultSet, filter_closed, filter_maximal
from .store import TransactionStore
from .support import count_support
from .transactions import from_transactions

__version__ = "0.1.0"

__all__ = [
    "mine_frequent",
    "mine_closed",
    "mine_maximal",
    "mine",
    "AutoMiner",
    "fpgrowth",
    "FPGrowth",
    "eclat",
    "Eclat",
    "fpclose",
    "FPClose",
    "charm",
    "Charm",
    "lcm",
    "LCM",
    "carpenter",
    "Carpenter",
    "fpmax",
    "FPMax",
    "genmax",
    "GenMax",
    "recover_closed",
    "recover_maximal",
    "from_transactions",
    "TransactionStore",
    "FPTree",
    "ResultSet",
    "filter_closed",
    "filter_maximal",
    "count_support",
    "BaseModel",
    "Miner",
    "ItemsetMiner",
]
