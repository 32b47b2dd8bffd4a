from .mutation_coordinator import MutationCoordinator, ResourceMutations

__all__ = ["MutationCoordinator", "ResourceMutations"]
