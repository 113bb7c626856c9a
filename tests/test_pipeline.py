"""Integration tests for hexmaker.codegen.pipeline.

Tests cover:
- Rendering an entity and its mapping into a project
- Configuration updates applied after each request
- The CRUD fan-out written end to end
- Duplicate destinations skipped within one run
- Aborting part-way with the count of written artifacts
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest
import yaml

from hexmaker.codegen import generate
from hexmaker.codegen.core.config import GeneratorConfig
from hexmaker.codegen.core.generator import (
    ArtifactKind,
    DestinationExistsError,
    GenerationAborted,
    GenerationInputError,
)
from hexmaker.codegen.core.patcher import ConfigTarget
from hexmaker.codegen.makers import ExceptionMaker
from hexmaker.codegen.pipeline import GenerationPipeline
from hexmaker.codegen.registry import MakerRegistry

pytestmark = pytest.mark.integration

ORDER_PROPERTIES = "total:float(0,),status:string:nullable"
MODEL_DIR = Path("src/Sales/Order/Domain/Model")
MAPPING_DIR = Path("src/Sales/Order/Infrastructure/Persistence/Doctrine/Orm/Mapping")


@pytest.fixture
def pipeline(project_dir: Path) -> GenerationPipeline:
    return GenerationPipeline(project_dir, GeneratorConfig())


def run_entity(pipeline: GenerationPipeline, **options):
    request = pipeline.build_request("entity", "sales/order", "Order", ORDER_PROPERTIES, options)
    return pipeline.run(request)


# ----------------------------------------------------------------------
# Entity generation
# ----------------------------------------------------------------------


class TestEntityGeneration:
    def test_entity_source(self, pipeline, project_dir: Path):
        result = run_entity(pipeline)

        assert [f.path for f in result.files] == [
            project_dir / MODEL_DIR / "Order.php",
            project_dir / MAPPING_DIR / "Order.orm.yml",
        ]
        source = (project_dir / MODEL_DIR / "Order.php").read_text(encoding="utf-8")
        assert "namespace App\\Sales\\Order\\Domain\\Model;" in source
        assert "final class Order" in source
        assert "private float $total;" in source
        assert "private ?string $status;" in source
        assert "if ($total < 0) {" in source
        assert "$total >" not in source
        assert "public function getStatus(): ?string" in source

    def test_mapping(self, pipeline, project_dir: Path):
        run_entity(pipeline)

        mapping = yaml.safe_load((project_dir / MAPPING_DIR / "Order.orm.yml").read_text(encoding="utf-8"))
        entity = mapping["App\\Sales\\Order\\Domain\\Model\\Order"]
        assert entity["table"] == "order"
        assert entity["id"]["id"] == {"type": "string", "length": 36}
        assert entity["fields"]["total"] == {"type": "decimal", "precision": 10, "scale": 2}
        assert entity["fields"]["status"] == {"type": "string", "length": 255, "nullable": True}

    def test_registers_mapping(self, pipeline, project_dir: Path):
        result = run_entity(pipeline)

        assert result.config_updates == {ConfigTarget.ORM_MAPPING: True}
        assert result.config_modified
        doctrine = yaml.safe_load((project_dir / "config/packages/doctrine.yaml").read_text(encoding="utf-8"))
        assert doctrine["doctrine"]["orm"]["mappings"]["SalesOrder"]["type"] == "yml"

    def test_xml_detected_from_composer(self, tmp_path: Path):
        (tmp_path / "composer.json").write_text('{"require": {"doctrine/orm": "^3.0"}}', encoding="utf-8")

        result = generate(tmp_path, "entity", "sales/order", "Order", ORDER_PROPERTIES)

        assert result.files[1].path.name == "Order.orm.xml"
        assert result.files[1].template_id == "infrastructure/Mapping.orm.xml.j2"

    def test_with_repository_and_id(self, pipeline, project_dir: Path):
        result = run_entity(pipeline, **{"with-repository": True, "with-id-vo": True})

        names = [f.path.name for f in result.files]
        assert names == [
            "Order.php",
            "Order.orm.yml",
            "OrderId.php",
            "OrderRepositoryInterface.php",
            "DoctrineOrderRepository.php",
        ]
        assert result.config_updates == {ConfigTarget.ORM_MAPPING: True, ConfigTarget.SERVICES: True}
        entity = (project_dir / MODEL_DIR / "Order.php").read_text(encoding="utf-8")
        assert "use App\\Sales\\Order\\Domain\\ValueObject\\OrderId;" in entity

    def test_without_auto_configure(self, project_dir: Path):
        pipeline = GenerationPipeline(project_dir, GeneratorConfig(auto_configure=False))
        result = run_entity(pipeline)

        assert result.config_updates == {}
        assert not (project_dir / "config").exists()


# ----------------------------------------------------------------------
# Overwrite policy and aborts
# ----------------------------------------------------------------------


class TestOverwrite:
    def test_second_run_aborts_without_force(self, pipeline):
        run_entity(pipeline)

        with pytest.raises(GenerationAborted) as excinfo:
            run_entity(pipeline)
        assert excinfo.value.written == []
        assert excinfo.value.remaining == 2
        assert isinstance(excinfo.value.__cause__, DestinationExistsError)

    def test_force_overwrites(self, pipeline):
        run_entity(pipeline)
        request = pipeline.build_request("entity", "sales/order", "Order", ORDER_PROPERTIES)
        result = pipeline.run(request, overwrite=True)

        assert all(f.overwritten for f in result.files)
        assert result.config_updates == {ConfigTarget.ORM_MAPPING: False}

    def test_abort_reports_written_files(self, pipeline, project_dir: Path):
        mapping = project_dir / MAPPING_DIR / "Order.orm.yml"
        mapping.parent.mkdir(parents=True)
        mapping.write_text("hand written\n", encoding="utf-8")

        with pytest.raises(GenerationAborted, match="1 of 2 artifacts") as excinfo:
            run_entity(pipeline)
        assert [f.path.name for f in excinfo.value.written] == ["Order.php"]
        assert excinfo.value.remaining == 1
        assert mapping.read_text(encoding="utf-8") == "hand written\n"
        assert not (project_dir / "config").exists()

    def test_invalid_request_writes_nothing(self, pipeline, project_dir: Path):
        request = pipeline.build_request("entity", "sales/order", "Order", options={"bogus": True})

        with pytest.raises(GenerationInputError):
            pipeline.run(request)
        assert not (project_dir / "src").exists()

    @pytest.mark.parametrize("path", ["", "   ", "my module/x y", "sales/1st"])
    def test_invalid_module_path_writes_nothing(self, pipeline, project_dir: Path, path):
        request = pipeline.build_request("command", path, "CreateOrder")

        with pytest.raises(GenerationInputError, match="[Mm]odule path"):
            pipeline.run(request)
        assert not (project_dir / "src").exists()
        assert not (project_dir / "config").exists()


# ----------------------------------------------------------------------
# Template overrides
# ----------------------------------------------------------------------


class TestTemplateOverrides:
    def test_relative_template_dir_is_project_relative(self, project_dir: Path, tmp_path_factory, monkeypatch):
        overrides = project_dir / "skeleton" / "domain"
        overrides.mkdir(parents=True)
        (overrides / "Exception.php.j2").write_text("<?php // custom {{ class_name }}\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))

        pipeline = GenerationPipeline(project_dir, GeneratorConfig(template_dir="skeleton"))
        result = pipeline.run(pipeline.build_request("exception", "sales", "Oops"))

        assert pipeline.template_override_dir == project_dir / "skeleton"
        assert result.files[0].path.read_text(encoding="utf-8") == "<?php // custom Oops\n"

    def test_absolute_template_dir_kept(self, project_dir: Path, tmp_path_factory):
        absolute = tmp_path_factory.mktemp("shared-skeleton")
        pipeline = GenerationPipeline(project_dir, GeneratorConfig(template_dir=str(absolute)))
        assert pipeline.template_override_dir == absolute


# ----------------------------------------------------------------------
# Composite requests
# ----------------------------------------------------------------------


class TestCrud:
    def test_fan_out(self, symfony_project: Path):
        result = generate(symfony_project, "crud", "sales/order", "Order", ORDER_PROPERTIES)

        assert len(result.files) == 30
        assert len({f.path for f in result.files}) == 30
        assert result.warnings == []
        assert result.config_updates == {
            ConfigTarget.ORM_MAPPING: True,
            ConfigTarget.SERVICES: True,
            ConfigTarget.MESSAGE_BUS: True,
            ConfigTarget.ROUTES: True,
        }

        controllers = symfony_project / "src/Sales/Order/UI/Http/Web/Controller"
        assert sorted(p.name for p in controllers.iterdir()) == [
            "CreateOrderController.php",
            "DeleteOrderController.php",
            "ListOrderController.php",
            "ShowOrderController.php",
            "UpdateOrderController.php",
        ]
        routes = yaml.safe_load((symfony_project / "config/routes.yaml").read_text(encoding="utf-8"))
        assert routes["sales_order_controllers"]["type"] == "attribute"

    def test_fan_out_with_tests(self, symfony_project: Path):
        result = generate(
            symfony_project, "crud", "sales/order", "Order", ORDER_PROPERTIES, {"with-tests": True}
        )

        assert len(result.files) == 40
        tests = [f for f in result.files if f.template_id.startswith("tests/")]
        assert len(tests) == 10

    def test_plan_matches_written_order(self, symfony_project: Path):
        pipeline = GenerationPipeline(symfony_project, GeneratorConfig())
        request = pipeline.build_request("crud", "sales/order", "Order", ORDER_PROPERTIES)

        planned = [b.destination for step in pipeline.plan(request) for b in step.bindings]
        written = pipeline.run(request).files

        assert [symfony_project.joinpath(*d.parts) for d in planned] == [f.path for f in written]
        assert pipeline.plan(request)[0].request.kind is ArtifactKind.CRUD


class RepeatingExceptionMaker(ExceptionMaker):
    """Binds the same file again through a child request."""

    def expand(self, request):
        if request.flag("no-interaction"):
            return []
        return [request.child(ArtifactKind.EXCEPTION, request.name)]


class TestDuplicates:
    def test_duplicate_destination_skipped(self, project_dir: Path):
        registry = MakerRegistry()
        registry.register(ArtifactKind.EXCEPTION, RepeatingExceptionMaker)
        pipeline = GenerationPipeline(project_dir, GeneratorConfig(), registry=registry)

        request = pipeline.build_request("exception", "sales/order", "OrderNotFound")
        steps = pipeline.plan(request)
        result = pipeline.run(request)

        assert len(result.files) == 1
        assert steps[1].skipped == [PurePosixPath("src/Sales/Order/Domain/Exception/OrderNotFound.php")]
        assert result.warnings == [
            "Skipped duplicate destination src/Sales/Order/Domain/Exception/OrderNotFound.php"
        ]


# ----------------------------------------------------------------------
# Every kind renders
# ----------------------------------------------------------------------

RICH_PROPERTIES = (
    "total:float(0,),status:string:nullable,email:email:unique,"
    "placedAt:datetime,active:bool,notes:text(,2000):nullable"
)


@pytest.mark.parametrize(
    "kind, name, properties, options",
    [
        ("entity", "Order", RICH_PROPERTIES,
         {"with-tests": True, "with-repository": True, "with-id-vo": True}),
        ("value-object", "Money", "amount:float(0,),currency:string(3,3)", {}),
        ("value-object", "Reference", None, {}),
        ("exception", "OrderNotFound", None, {}),
        ("domain-event", "OrderPlaced", "orderId:string", {"with-subscriber": True}),
        ("repository", "Order", "email:email:unique", {}),
        ("command", "CreateOrder", RICH_PROPERTIES, {"with-tests": True, "factory": True}),
        ("command", "UpdateOrder", RICH_PROPERTIES, {"with-tests": True}),
        ("command", "DeleteOrder", None, {"with-tests": True}),
        ("command", "ShipOrder", None, {}),
        ("query", "GetOrder", None, {"with-tests": True}),
        ("query", "ListOrders", None, {"collection": True, "with-tests": True}),
        ("query", "FindOrderByStatus", "status:string", {"with-tests": True}),
        ("use-case", "CreateOrder", None, {"with-tests": True}),
        ("input", "CreateOrderInput", RICH_PROPERTIES, {}),
        ("message-handler", "SendInvoice", "invoiceId:string", {"with-message": True}),
        ("event-subscriber", "Audit", None, {"layer": "infrastructure"}),
        ("controller", "CreateOrder", RICH_PROPERTIES, {"with-workflow": True, "with-tests": True}),
        ("form", "Order", RICH_PROPERTIES, {"with-command": True}),
        ("cli-command", "DeleteOrder", None, {"with-use-case": True, "with-tests": True}),
        ("use-case-test", "CreateOrder", None, {}),
        ("controller-test", "ShowOrder", None, {"route": "/orders/{id}"}),
        ("cli-command-test", "ImportOrders", None, {}),
    ],
)
def test_every_kind_renders(symfony_project: Path, kind, name, properties, options):
    result = generate(symfony_project, kind, "sales/order", name, properties, options)

    assert result.files
    for written in result.files:
        content = written.path.read_text(encoding="utf-8")
        if written.path.suffix == ".php":
            assert content.startswith("<?php\n")
            assert "namespace App\\" in content
        assert content.strip()
