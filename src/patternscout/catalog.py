"""Built-in sample catalog of classic object-oriented design patterns.

Backs the CLI and the test suite. Not an ingestion pipeline: the records are
plain Python data loaded into an InMemoryPatternStore.
"""

from __future__ import annotations

from typing import Final

from patternscout.search.models import DetailedPattern, PatternImplementation, PatternRelationship
from patternscout.store.memory import InMemoryPatternStore

PATTERNS: Final[tuple[DetailedPattern, ...]] = (
    # Creational
    DetailedPattern(
        id="singleton",
        name="Singleton",
        category="Creational",
        description=(
            "Ensures a class has only one instance and provides a global point of access to it."
        ),
        complexity="Low",
        tags=("instance", "global", "shared-state", "lazy-initialization", "python", "typescript"),
        when_to_use=("Exactly one object must coordinate actions across the system",),
        benefits=("Controlled creation", "Lazy initialization", "Reduced namespace pollution"),
        drawbacks=("Hidden dependencies", "Harder to unit test", "Concurrency pitfalls"),
        use_cases=("Configuration registry", "Connection pool", "Logger"),
    ),
    DetailedPattern(
        id="factory-method",
        name="Factory Method",
        category="Creational",
        description=(
            "Defines an interface for creating an object but lets subclasses decide which "
            "class to instantiate."
        ),
        complexity="Medium",
        tags=("creation", "subclassing", "polymorphism", "python", "typescript", "java"),
        when_to_use=("A class cannot anticipate the class of objects it must create",),
        benefits=("Decouples client code from concrete classes", "Open for extension"),
        drawbacks=("Can multiply subclasses",),
        use_cases=("Document editors", "Parsers selected by file type"),
    ),
    DetailedPattern(
        id="abstract-factory",
        name="Abstract Factory",
        category="Creational",
        description=(
            "Provides an interface for creating families of related or dependent objects "
            "without specifying their concrete classes."
        ),
        complexity="High",
        tags=("creation", "families", "product-families", "java"),
        when_to_use=("A system must be independent of how its products are created",),
        benefits=("Consistent product families", "Isolates concrete classes"),
        drawbacks=("Adding new product kinds is hard",),
        use_cases=("Cross-platform UI toolkits", "Database driver families"),
    ),
    DetailedPattern(
        id="builder",
        name="Builder",
        category="Creational",
        description=(
            "Separates the construction of a complex object from its representation so the "
            "same construction process can create different representations."
        ),
        complexity="Medium",
        tags=("creation", "fluent", "step-by-step", "python", "typescript"),
        when_to_use=("Objects need many optional parts assembled in steps",),
        benefits=("Readable construction", "Immutable results"),
        drawbacks=("More classes", "Verbose for simple objects"),
        use_cases=("Query builders", "HTTP request builders"),
    ),
    DetailedPattern(
        id="prototype",
        name="Prototype",
        category="Creational",
        description=(
            "Specifies the kinds of objects to create using a prototypical instance and "
            "creates new objects by copying it."
        ),
        complexity="Medium",
        tags=("cloning", "copy", "creation"),
        when_to_use=("Creating an object is more expensive than copying one",),
        benefits=("Avoids subclass explosion", "Runtime configuration of products"),
        drawbacks=("Deep copies of cyclic structures are tricky",),
        use_cases=("Game entity spawning", "Document templates"),
    ),
    # Structural
    DetailedPattern(
        id="adapter",
        name="Adapter",
        category="Structural",
        description=(
            "Converts the interface of a class into another interface clients expect, letting "
            "incompatible classes work together."
        ),
        complexity="Low",
        tags=("wrapper", "compatibility", "integration", "python", "typescript"),
        when_to_use=("An existing class has the wrong interface for its callers",),
        benefits=("Reuses existing code", "Isolates third-party APIs"),
        drawbacks=("Extra indirection",),
        use_cases=("Legacy system integration", "Third-party SDK wrappers"),
    ),
    DetailedPattern(
        id="decorator",
        name="Decorator",
        category="Structural",
        description=(
            "Attaches additional responsibilities to an object dynamically, a flexible "
            "alternative to subclassing for extending behavior."
        ),
        complexity="Medium",
        tags=("wrapper", "composition", "extension", "python"),
        when_to_use=("Responsibilities must be added to objects without subclassing",),
        benefits=("Composable behavior", "Single-purpose wrappers"),
        drawbacks=("Many small objects", "Order-dependent stacking"),
        use_cases=("Stream wrappers", "Middleware chains"),
    ),
    DetailedPattern(
        id="facade",
        name="Facade",
        category="Structural",
        description=(
            "Provides a unified, simplified interface to a set of interfaces in a subsystem."
        ),
        complexity="Low",
        tags=("simplification", "subsystem", "api"),
        when_to_use=("Clients need a simple entry point into a complex subsystem",),
        benefits=("Reduces coupling to subsystem internals",),
        drawbacks=("Can become a god object",),
        use_cases=("Library entry points", "Service layers"),
    ),
    DetailedPattern(
        id="proxy",
        name="Proxy",
        category="Structural",
        description=(
            "Provides a surrogate or placeholder for another object to control access to it."
        ),
        complexity="Medium",
        tags=("surrogate", "lazy-loading", "remote", "caching"),
        when_to_use=("Object use needs lazy loading, caching or permission checks",),
        benefits=("Transparent to clients", "Adds control without changing the subject"),
        drawbacks=("Added latency", "More classes"),
        use_cases=("Remote proxies", "Virtual proxies for heavy resources"),
    ),
    DetailedPattern(
        id="composite",
        name="Composite",
        category="Structural",
        description=(
            "Composes objects into tree structures to represent part-whole hierarchies and "
            "lets clients treat leaves and groups uniformly."
        ),
        complexity="Medium",
        tags=("tree", "hierarchy", "recursion"),
        when_to_use=("Clients should ignore the difference between compositions and leaves",),
        benefits=("Uniform treatment of nodes", "Easy to add node kinds"),
        drawbacks=("Overly general component interface",),
        use_cases=("UI widget trees", "File system models"),
    ),
    # Behavioral
    DetailedPattern(
        id="observer",
        name="Observer",
        category="Behavioral",
        description=(
            "Defines a one-to-many dependency so that when one object changes state, all its "
            "dependents are notified and updated automatically."
        ),
        complexity="Medium",
        tags=("events", "publish-subscribe", "notification", "python", "typescript"),
        when_to_use=("A change to one object requires changing an unknown set of others",),
        benefits=("Loose coupling between subject and observers", "Broadcast communication"),
        drawbacks=("Unexpected update cascades", "Memory leaks from forgotten subscribers"),
        use_cases=("Event systems", "Model-view synchronization"),
    ),
    DetailedPattern(
        id="strategy",
        name="Strategy",
        category="Behavioral",
        description=(
            "Defines a family of algorithms, encapsulates each one and makes them "
            "interchangeable at runtime."
        ),
        complexity="Low",
        tags=("algorithms", "polymorphism", "runtime-selection", "python", "typescript"),
        when_to_use=("Several variants of an algorithm are needed",),
        benefits=("Eliminates conditionals", "Algorithms testable in isolation"),
        drawbacks=("Clients must know the strategies",),
        use_cases=("Sorting policies", "Pricing rules", "Compression codecs"),
    ),
    DetailedPattern(
        id="command",
        name="Command",
        category="Behavioral",
        description=(
            "Encapsulates a request as an object, allowing parameterization, queuing, logging "
            "and undoable operations."
        ),
        complexity="Medium",
        tags=("request", "undo", "queue"),
        when_to_use=("Operations must be queued, logged or undone",),
        benefits=("Decouples invoker from receiver", "Supports undo/redo"),
        drawbacks=("Many small command classes",),
        use_cases=("Editor undo stacks", "Job queues"),
    ),
    DetailedPattern(
        id="state",
        name="State",
        category="Behavioral",
        description=(
            "Allows an object to alter its behavior when its internal state changes, "
            "appearing to change its class."
        ),
        complexity="Medium",
        tags=("state-machine", "transitions", "polymorphism"),
        when_to_use=("Behavior depends on a mode that changes at runtime",),
        benefits=("Localizes mode-specific behavior", "Explicit transitions"),
        drawbacks=("More classes for small machines",),
        use_cases=("Protocol handlers", "Workflow engines"),
    ),
    DetailedPattern(
        id="template-method",
        name="Template Method",
        category="Behavioral",
        description=(
            "Defines the skeleton of an algorithm in a base operation, deferring some steps "
            "to subclasses."
        ),
        complexity="Low",
        tags=("inheritance", "hooks", "algorithms"),
        when_to_use=("Invariant parts of an algorithm should be written once",),
        benefits=("Code reuse", "Controlled extension points"),
        drawbacks=("Inheritance coupling",),
        use_cases=("Framework lifecycles", "Test fixtures"),
    ),
    DetailedPattern(
        id="mediator",
        name="Mediator",
        category="Behavioral",
        description=(
            "Defines an object that encapsulates how a set of objects interact, promoting "
            "loose coupling by keeping them from referring to each other explicitly."
        ),
        complexity="High",
        tags=("coordination", "decoupling", "hub"),
        when_to_use=("Many objects communicate in complex but well-defined ways",),
        benefits=("Reduces many-to-many dependencies",),
        drawbacks=("The mediator can grow monolithic",),
        use_cases=("Chat rooms", "Dialog controllers", "Air traffic control"),
    ),
)


IMPLEMENTATIONS: Final[tuple[PatternImplementation, ...]] = (
    PatternImplementation(
        id="singleton-python",
        pattern_id="singleton",
        language="python",
        code=(
            "class Config:\n"
            "    _instance = None\n\n"
            "    def __new__(cls):\n"
            "        if cls._instance is None:\n"
            "            cls._instance = super().__new__(cls)\n"
            "        return cls._instance\n"
        ),
        explanation="__new__ returns the cached object on every call after the first.",
        created_at="2024-03-01T10:00:00Z",
    ),
    PatternImplementation(
        id="singleton-typescript",
        pattern_id="singleton",
        language="typescript",
        code=(
            "class Config {\n"
            "  private static instance?: Config;\n"
            "  private constructor() {}\n"
            "  static get(): Config {\n"
            "    return (Config.instance ??= new Config());\n"
            "  }\n"
            "}\n"
        ),
        explanation="A private constructor forces callers through the static accessor.",
        created_at="2024-02-01T10:00:00Z",
    ),
    PatternImplementation(
        id="factory-method-python",
        pattern_id="factory-method",
        language="python",
        code=(
            "class Dialog:\n"
            "    def create_button(self) -> Button:\n"
            "        raise NotImplementedError\n\n"
            "    def render(self) -> None:\n"
            "        self.create_button().draw()\n\n\n"
            "class WebDialog(Dialog):\n"
            "    def create_button(self) -> Button:\n"
            "        return HtmlButton()\n"
        ),
        explanation="Subclasses override create_button to choose the concrete product.",
        created_at="2024-03-05T09:00:00Z",
    ),
    PatternImplementation(
        id="factory-method-python-registry",
        pattern_id="factory-method",
        language="python",
        code=(
            "PARSERS: dict[str, type[Parser]] = {'json': JsonParser, 'toml': TomlParser}\n\n\n"
            "def parser_for(suffix: str) -> Parser:\n"
            "    return PARSERS[suffix]()\n"
        ),
        explanation="A registry-backed factory function picks the class by key.",
        created_at="2024-01-10T09:00:00Z",
    ),
    PatternImplementation(
        id="factory-method-typescript",
        pattern_id="factory-method",
        language="typescript",
        code=(
            "abstract class Dialog {\n"
            "  abstract createButton(): Button;\n"
            "  render(): void { this.createButton().draw(); }\n"
            "}\n"
        ),
        explanation="The abstract creator defers product choice to subclasses.",
        created_at="2024-02-20T09:00:00Z",
    ),
    PatternImplementation(
        id="observer-python",
        pattern_id="observer",
        language="python",
        code=(
            "class Subject:\n"
            "    def __init__(self) -> None:\n"
            "        self._observers: list[Callable[[str], None]] = []\n\n"
            "    def subscribe(self, fn: Callable[[str], None]) -> None:\n"
            "        self._observers.append(fn)\n\n"
            "    def notify(self, event: str) -> None:\n"
            "        for fn in self._observers:\n"
            "            fn(event)\n"
        ),
        explanation="Observers register callables and are invoked on every event.",
        created_at="2024-03-02T12:00:00Z",
    ),
    PatternImplementation(
        id="strategy-python",
        pattern_id="strategy",
        language="python",
        code=(
            "def checkout(total: float, pricing: Callable[[float], float]) -> float:\n"
            "    return pricing(total)\n\n\n"
            "checkout(100.0, lambda t: t * 0.9)\n"
        ),
        explanation="First-class functions serve as interchangeable strategies.",
        created_at="2024-03-03T12:00:00Z",
    ),
    PatternImplementation(
        id="adapter-python",
        pattern_id="adapter",
        language="python",
        code=(
            "class LegacyPrinterAdapter:\n"
            "    def __init__(self, legacy: LegacyPrinter) -> None:\n"
            "        self._legacy = legacy\n\n"
            "    def print(self, text: str) -> None:\n"
            "        self._legacy.print_text(text.encode())\n"
        ),
        explanation="The adapter exposes the expected method and delegates to the legacy API.",
        created_at="2024-03-04T12:00:00Z",
    ),
    PatternImplementation(
        id="decorator-python",
        pattern_id="decorator",
        language="python",
        code=(
            "class CompressedStream:\n"
            "    def __init__(self, inner: Stream) -> None:\n"
            "        self._inner = inner\n\n"
            "    def write(self, data: bytes) -> None:\n"
            "        self._inner.write(zlib.compress(data))\n"
        ),
        explanation="The wrapper adds compression while keeping the Stream interface.",
        created_at="2024-03-06T12:00:00Z",
    ),
)


RELATIONSHIPS: Final[tuple[PatternRelationship, ...]] = (
    PatternRelationship(
        "factory-method", "abstract-factory", "alternative",
        "Use when whole product families must vary together",
    ),
    PatternRelationship(
        "factory-method", "prototype", "alternative",
        "Copies a configured object instead of subclassing the creator",
    ),
    PatternRelationship(
        "factory-method", "template-method", "complements",
        "Factory methods are often called from template methods",
    ),
    PatternRelationship(
        "abstract-factory", "factory-method", "similar",
        "Each product is usually built by a factory method",
    ),
    PatternRelationship(
        "builder", "abstract-factory", "similar",
        "Both hide construction; builders assemble step by step",
    ),
    PatternRelationship(
        "singleton", "facade", "similar",
        "A facade is frequently exposed as the one shared entry point",
    ),
    PatternRelationship(
        "singleton", "dependency-injection", "alternative",
        "Pass the shared object explicitly instead of reaching for it",
    ),
    PatternRelationship(
        "adapter", "facade", "alternative",
        "Simplifies an interface instead of converting it",
    ),
    PatternRelationship(
        "adapter", "proxy", "similar",
        "Both wrap another object; a proxy keeps the same interface",
    ),
    PatternRelationship(
        "decorator", "proxy", "similar",
        "Same wrapping structure with a different intent",
    ),
    PatternRelationship(
        "decorator", "composite", "complements",
        "Decorators are often applied to composite nodes",
    ),
    PatternRelationship(
        "proxy", "decorator", "similar",
        "Adds behavior rather than controlling use",
    ),
    PatternRelationship(
        "observer", "mediator", "alternative",
        "Centralizes communication instead of broadcasting",
    ),
    PatternRelationship(
        "strategy", "state", "similar",
        "Same structure; the context switches states itself",
    ),
    PatternRelationship(
        "strategy", "template-method", "alternative",
        "Varies steps through inheritance instead of composition",
    ),
    PatternRelationship(
        "command", "strategy", "similar",
        "Both encapsulate behavior as objects",
    ),
    PatternRelationship(
        "state", "strategy", "similar",
        "Strategies are chosen by the client rather than by transitions",
    ),
    PatternRelationship(
        "mediator", "observer", "alternative",
        "Distributes communication through subscriptions",
    ),
)


def load_catalog() -> InMemoryPatternStore:
    """Return a fresh store populated with the built-in catalog."""
    return InMemoryPatternStore(PATTERNS, IMPLEMENTATIONS, RELATIONSHIPS)


__all__ = ["IMPLEMENTATIONS", "PATTERNS", "RELATIONSHIPS", "load_catalog"]
