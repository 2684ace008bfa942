from .dodge_env import DodgeEnv
