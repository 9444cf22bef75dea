import json

import pytest

from doplan.templates import TemplateConfig, TemplateManager, TemplateNotFoundError


def test_manager_paths(tmp_path):
    manager = TemplateManager(tmp_path)
    assert manager.templates_dir == tmp_path / "doplan" / "templates"
    assert manager.config_path == tmp_path / ".doplan" / "templates.json"


def test_list_templates(tmp_path):
    manager = TemplateManager(tmp_path)
    template_dir = tmp_path / "doplan" / "templates"
    template_dir.mkdir(parents=True)
    (template_dir / "test.md").write_text("# Test")
    (template_dir / "notes.txt").write_text("skip")
    (template_dir / "folder.md").mkdir()

    assert manager.list_templates() == ["test.md"]


def test_list_templates_without_directory(tmp_path):
    assert TemplateManager(tmp_path).list_templates() == []


def test_get_template(tmp_path):
    manager = TemplateManager(tmp_path)
    template_dir = tmp_path / "doplan" / "templates"
    template_dir.mkdir(parents=True)
    content = "# Test Template\n\nContent here"
    (template_dir / "test.md").write_text(content)

    assert manager.get_template("test.md") == content


def test_get_template_missing(tmp_path):
    with pytest.raises(TemplateNotFoundError, match="template not found: nope.md"):
        TemplateManager(tmp_path).get_template("nope.md")


def test_add_template(tmp_path):
    manager = TemplateManager(tmp_path)
    manager.add_template("new.md", "# New Template")
    path = manager.templates_dir / "new.md"
    assert path.is_file()
    assert manager.get_template("new.md") == "# New Template"


def test_remove_template(tmp_path):
    manager = TemplateManager(tmp_path)
    manager.add_template("temp.md", "# Temp")
    manager.remove_template("temp.md")
    assert not (manager.templates_dir / "temp.md").exists()


def test_remove_missing_template(tmp_path):
    with pytest.raises(FileNotFoundError):
        TemplateManager(tmp_path).remove_template("temp.md")


def test_load_config_defaults(tmp_path):
    config = TemplateManager(tmp_path).load_config()
    assert config.default_plan == "plan-template.md"
    assert config.default_design == "design-template.md"
    assert config.default_tasks == "tasks-template.md"
    assert config.templates == {}


def test_save_config(tmp_path):
    manager = TemplateManager(tmp_path)
    config = TemplateConfig(
        default_plan="plan.md",
        default_design="design.md",
        default_tasks="tasks.md",
        templates={"custom": "custom.md"},
    )
    manager.save_config(config)

    loaded = manager.load_config()
    assert loaded.default_plan == "plan.md"
    assert loaded == config


def test_load_config_null_templates(tmp_path):
    manager = TemplateManager(tmp_path)
    manager.config_path.parent.mkdir(parents=True)
    manager.config_path.write_text(json.dumps({"defaultPlan": "plan.md", "templates": None}))

    loaded = manager.load_config()
    assert loaded.templates == {}
    assert loaded.default_plan == "plan.md"
    assert loaded.default_design == ""


def test_get_default_template_all_types(tmp_path):
    manager = TemplateManager(tmp_path)
    manager.save_config(
        TemplateConfig(default_plan="plan.md", default_design="design.md", default_tasks="tasks.md")
    )
    assert manager.get_default_template("plan") == "plan.md"
    assert manager.get_default_template("design") == "design.md"
    assert manager.get_default_template("tasks") == "tasks.md"


def test_get_default_template_unknown_type(tmp_path):
    manager = TemplateManager(tmp_path)
    manager.save_config(TemplateConfig(default_plan="plan.md"))
    with pytest.raises(ValueError, match="unknown template type"):
        manager.get_default_template("unknown")


def test_get_default_template_missing_config(tmp_path):
    manager = TemplateManager(tmp_path)
    assert manager.get_default_template("plan") == "plan-template.md"