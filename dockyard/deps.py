from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, Sequence

Module = ModuleType
Modules = Sequence[Module]
"""Service modules, as handed to `dockyard.runner.provision`"""


def dependencies(module: Module) -> Modules:
    func: Optional[Callable[[], Modules]] = getattr(module, "dependencies", None)
    if func is None:
        return []
    return func()


def generate_dependencies(modules: Modules) -> List[Module]:
    """Expand `modules` with everything they depend on, dependencies first.

    Modules keep the order they were asked for unless a dependency forces one
    earlier, and each module appears once.
    """
    ordered: List[Module] = []
    visiting: List[Module] = []

    def visit(module: Module) -> None:
        if module in ordered:
            return
        if module in visiting:
            chain = " -> ".join(m.__name__ for m in visiting + [module])
            raise Exception(f"Dependency cycle: {chain}")
        visiting.append(module)
        for dependency in dependencies(module):
            visit(dependency)
        visiting.remove(module)
        ordered.append(module)

    for module in modules:
        visit(module)

    return ordered


def runfunc(modules: Modules, name: str, *args: Any) -> Dict[str, Any]:
    ret: Dict[str, Any] = {}
    for module in modules:
        func: Optional[Callable[..., Any]] = getattr(module, name, None)
        if func is None:
            continue
        try:
            ret[module.__name__] = func(*args)
        except Exception:
            print(f"Error while running {name} for {module.__name__}")
            raise
    return ret
