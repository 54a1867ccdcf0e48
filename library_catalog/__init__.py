"""Library catalog query and recommendation engine.

Subpackages:
- core: settings, exceptions, structured logging
- models: Book / LoanRecord domain types and source protocols
- nlp: tokenizers
- search: inverted indexes, query parser and evaluator
- recommendation: collaborative, content-based and hybrid rankers
- catalog: book catalog, loan history, persistence and the Library facade
"""

__version__ = "0.1.0"
