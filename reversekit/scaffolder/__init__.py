"""ReverseKit scaffolder -- renders Laravel source files from entities.

Quick usage::

    from reversekit.scaffolder import ProjectGenerator

    generator = ProjectGenerator(config)
    report = await generator.generate(entities)
    for item in report.files:
        print(item.tag)
"""

from reversekit.scaffolder.base import BaseGenerator, FileStatus, GeneratedFile
from reversekit.scaffolder.controller_gen import ControllerGenerator
from reversekit.scaffolder.factory_gen import FactoryGenerator
from reversekit.scaffolder.generator import GenerationReport, ProjectGenerator
from reversekit.scaffolder.migration_gen import MigrationGenerator
from reversekit.scaffolder.model_gen import ModelGenerator
from reversekit.scaffolder.policy_gen import PolicyGenerator
from reversekit.scaffolder.request_gen import FormRequestGenerator
from reversekit.scaffolder.resource_gen import ResourceGenerator
from reversekit.scaffolder.route_gen import RouteGenerator
from reversekit.scaffolder.seeder_gen import SeederGenerator
from reversekit.scaffolder.templates import TemplateRenderer
from reversekit.scaffolder.test_gen import TestGenerator

__all__ = [
    "BaseGenerator",
    "ControllerGenerator",
    "FactoryGenerator",
    "FileStatus",
    "FormRequestGenerator",
    "GeneratedFile",
    "GenerationReport",
    "MigrationGenerator",
    "ModelGenerator",
    "PolicyGenerator",
    "ProjectGenerator",
    "ResourceGenerator",
    "RouteGenerator",
    "SeederGenerator",
    "TemplateRenderer",
    "TestGenerator",
]
