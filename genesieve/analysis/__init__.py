"""
Analysis engine for genesieve.

Modules in this package:
- steps: step tags, step kinds and the AnalysisStep base class
- step_checker: repairs the ordering of a declared step list
- grouping: splits checked steps into same-kind groups
- analysis: the immutable AnalysisConfig
- parser: builds an AnalysisConfig from a declaration dictionary
- strategies: Simple, Sparse and PassOnly execution strategies
- stages: the pipeline stages driven for one run
- runner: AnalysisRunner, the entry point of a run
"""
