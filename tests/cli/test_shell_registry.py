"""Tests for shell line handling and command handlers."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from arbor.compose import build_container, create_embedded
from arbor.config.manager import DEFAULT_ALIASES
from arbor.frontends.cli.shell.registry import (
    COMMANDS,
    CommandAction,
    CommandContext,
    UsageError,
    execute_line,
    expand_alias,
    parse_line,
    parse_value,
)
from arbor.frontends.cli.shell.themes import get_theme


def make_console() -> Console:
    """Console writing plain text to a buffer."""
    return Console(file=io.StringIO(), theme=get_theme("default"), width=200, color_system=None)


def output(ctx: CommandContext) -> str:
    """Everything printed so far, clearing the buffer."""
    stream = ctx.console.file
    text = stream.getvalue()
    stream.seek(0)
    stream.truncate()
    return text


@pytest.fixture
def ctx(session, tmp_path):
    """Context around the sample repository, embedded mode."""
    container = create_embedded(session, config_dir=tmp_path)
    return CommandContext(container=container, console=make_console(), aliases=DEFAULT_ALIASES)


@pytest.fixture
def standalone_ctx(tmp_path):
    """Context in standalone mode with a second workspace."""
    container = build_container(config_dir=tmp_path)
    session = container.session
    session.get_root_node().add_node("content")
    session.save()
    session.get_workspace().create_workspace("staging")
    return CommandContext(container=container, console=make_console())


# =============================================================================
# Line handling
# =============================================================================


class TestExpandAlias:
    """Tests for alias expansion."""

    def test_not_an_alias(self):
        """Lines without an alias are returned stripped."""
        assert expand_alias("  ls /content ", {"ll": "ls -l {arg}"}) == "ls /content"

    def test_all_arguments(self):
        """{arg} takes every argument."""
        assert expand_alias("ll /a", {"ll": "ls -l {arg}"}) == "ls -l /a"

    def test_positional_arguments(self):
        """{argN} takes the Nth argument."""
        aliases = {"swap": "mv {arg2} {arg1}"}
        assert expand_alias("swap a b", aliases) == "mv b a"

    def test_missing_argument(self):
        """Placeholders without an argument disappear."""
        assert expand_alias("ll", {"ll": "ls -l {arg}"}) == "ls -l"
        assert expand_alias("swap a", {"swap": "mv {arg2} {arg1}"}) == "mv  a"

    def test_quoted_argument(self):
        """Positional arguments keep their quoting."""
        assert expand_alias('mk "a b"', {"mk": "mkdir {arg1}"}) == "mkdir 'a b'"

    def test_empty_line(self):
        """Blank lines stay blank."""
        assert expand_alias("   ", {"ll": "ls"}) == ""


class TestParseLine:
    """Tests for argument splitting."""

    def test_quotes(self):
        """Quoted words stay together."""
        assert parse_line('set title "Hello World"') == ["set", "title", "Hello World"]

    def test_unbalanced_quotes(self):
        """Unbalanced quotes are a usage error."""
        with pytest.raises(UsageError, match="Cannot parse"):
            parse_line('set title "Hello')


class TestParseValue:
    """Tests for property value parsing."""

    def test_types(self):
        """Integers, floats and booleans are recognized."""
        assert parse_value("42") == 42
        assert parse_value("-7") == -7
        assert parse_value("1.5") == 1.5
        assert parse_value("TRUE") is True
        assert parse_value("false") is False

    def test_strings(self):
        """Anything else stays a string."""
        assert parse_value("hello") == "hello"
        assert parse_value("1.2.3") == "1.2.3"
        assert parse_value("nan") == "nan"


# =============================================================================
# Commands
# =============================================================================


class TestNavigationCommands:
    """Tests for pwd, cd, ls, cat and find."""

    def test_pwd(self, ctx):
        """pwd prints the working location."""
        execute_line(ctx, "pwd")
        assert output(ctx).strip() == "/"

    def test_cd(self, ctx):
        """cd changes the working location; no argument goes to the root."""
        execute_line(ctx, "cd content/articles")
        assert ctx.session.cwd == "/content/articles"
        execute_line(ctx, "cd")
        assert ctx.session.cwd == "/"

    def test_cd_missing(self, ctx):
        """A failed cd prints an error and keeps the location."""
        execute_line(ctx, "cd /content")
        execute_line(ctx, "cd nowhere")
        assert "Error: No item at path: /content/nowhere" in output(ctx)
        assert ctx.session.cwd == "/content"
        assert ctx.state.last_error is not None

    def test_cd_identifier(self, ctx):
        """cd accepts node identifiers."""
        identifier = ctx.session.get_node("/content/pages").identifier
        execute_line(ctx, f"cd {identifier}")
        assert ctx.session.cwd == "/content/pages"

    def test_ls(self, ctx):
        """ls lists child nodes first, then properties."""
        execute_line(ctx, "ls /content/articles/first")
        text = output(ctx)
        assert "title" in text
        assert "First" in text
        assert "[a, b]" in text

    def test_ls_children(self, ctx):
        """Child nodes are suffixed with a slash."""
        execute_line(ctx, "cd content")
        execute_line(ctx, "ls")
        text = output(ctx)
        assert "articles/" in text
        assert "pages/" in text

    def test_ls_long_shows_identifiers(self, ctx):
        """ls -l adds node identifiers."""
        identifier = ctx.session.get_node("/content/articles").identifier
        execute_line(ctx, "ls -l /content")
        assert identifier in output(ctx)

    def test_ls_glob(self, ctx):
        """A glob argument lists matching paths."""
        execute_line(ctx, "ls /content/*")
        assert output(ctx).split() == ["/content/articles", "/content/pages"]

    def test_ls_glob_no_match(self, ctx):
        """An empty glob result says so."""
        execute_line(ctx, "ls /none/*")
        assert "No nodes match" in output(ctx)

    def test_ls_unknown_option(self, ctx):
        """Unknown options are reported."""
        execute_line(ctx, "ls -z")
        assert "Unknown option: -z" in output(ctx)

    def test_cat_property(self, ctx):
        """cat prints a property value."""
        execute_line(ctx, "cat /content/articles/first/title")
        assert output(ctx).strip() == "First"

    def test_cat_multi_value(self, ctx):
        """Multi-valued properties print one value per line."""
        execute_line(ctx, "cat /content/articles/first/tags")
        assert output(ctx).split() == ["a", "b"]

    def test_cat_node(self, ctx):
        """cat on a node shows its identity and properties."""
        node = ctx.session.get_node("/content/articles/first")
        execute_line(ctx, "cat /content/articles/first")
        text = output(ctx)
        assert node.identifier in text
        assert "nt:unstructured" in text

    def test_cat_missing(self, ctx):
        """cat on a missing path reports it."""
        execute_line(ctx, "cat /missing")
        assert "No item at path: /missing" in output(ctx)

    def test_find(self, ctx):
        """find prints matching paths relative to the cwd."""
        execute_line(ctx, "cd /content")
        execute_line(ctx, "find */f*")
        assert output(ctx).strip() == "/content/articles/first"

    def test_exists(self, ctx):
        """exists answers yes or no."""
        execute_line(ctx, "exists /content")
        assert output(ctx).strip() == "yes"
        execute_line(ctx, "exists /nothing")
        assert output(ctx).strip() == "no"


class TestEditingCommands:
    """Tests for mkdir, set, unset, mv, cp and rm."""

    def test_mkdir(self, ctx):
        """mkdir creates a node with an optional type."""
        execute_line(ctx, "mkdir /content/news nt:folder")
        assert ctx.session.get_node("/content/news").primary_type == "nt:folder"
        assert "Created /content/news" in output(ctx)

    def test_mkdir_existing(self, ctx):
        """Creating an existing node is an error."""
        execute_line(ctx, "mkdir /content")
        assert "Item already exists: /content" in output(ctx)

    def test_mkdir_missing_argument(self, ctx):
        """Missing arguments print the usage."""
        execute_line(ctx, "mkdir")
        assert "Usage: mkdir <path> [type]" in output(ctx)

    def test_set(self, ctx):
        """set parses values; quoted text stays one string."""
        execute_line(ctx, "cd /content")
        execute_line(ctx, 'set title "Hello World"')
        execute_line(ctx, "set count 3")
        node = ctx.session.get_node("/content")
        assert node.get_property_value("title") == "Hello World"
        assert node.get_property_value("count") == 3

    def test_set_multiple_values(self, ctx):
        """Several values make a multi-valued property."""
        execute_line(ctx, "set /content/tags x y z")
        assert ctx.session.get_property("/content/tags").value == ["x", "y", "z"]

    def test_unset(self, ctx):
        """unset removes a property but not a node."""
        execute_line(ctx, "unset /content/articles/first/title")
        assert not ctx.session.property_exists("/content/articles/first/title")
        execute_line(ctx, "unset /content/articles")
        assert "No such property" in output(ctx)
        assert ctx.session.node_exists("/content/articles")

    def test_mv_into_existing(self, ctx):
        """mv into an existing node keeps the name."""
        execute_line(ctx, "mv /content/pages /archive")
        assert ctx.session.node_exists("/archive/pages")
        assert "Moved to /archive/pages" in output(ctx)

    def test_mv_rename(self, ctx):
        """mv to a new path renames."""
        execute_line(ctx, "cd /content")
        execute_line(ctx, "mv pages sections")
        assert ctx.session.node_exists("/content/sections")

    def test_mv_ancestor_of_cwd(self, ctx):
        """Moving an ancestor carries the working location along."""
        execute_line(ctx, "cd /content/articles")
        execute_line(ctx, "mv /content /archive")

        assert ctx.session.cwd == "/archive/content/articles"
        output(ctx)
        execute_line(ctx, "ls")
        assert "first/" in output(ctx)
        assert ctx.state.last_error is None

    def test_mv_cwd_itself(self, ctx):
        """Renaming the working location follows the new name."""
        execute_line(ctx, "cd /content/pages")
        execute_line(ctx, "mv /content/pages /content/sections")
        assert ctx.session.cwd == "/content/sections"

    def test_mv_elsewhere_keeps_cwd(self, ctx):
        """Unrelated moves leave the working location alone."""
        execute_line(ctx, "cd /content/articles")
        execute_line(ctx, "mv /content/pages /archive")
        assert ctx.session.cwd == "/content/articles"

    def test_cp(self, ctx):
        """cp copies a subtree."""
        execute_line(ctx, "cp /content/articles /archive")
        assert ctx.session.node_exists("/archive/articles/first")
        assert ctx.session.node_exists("/content/articles/first")

    def test_rm(self, ctx):
        """rm removes nodes and properties."""
        execute_line(ctx, "rm /content/articles/first/title")
        execute_line(ctx, "rm /content/pages")
        assert not ctx.session.item_exists("/content/articles/first/title")
        assert not ctx.session.node_exists("/content/pages")

    def test_rm_cwd_moves_up(self, ctx):
        """Removing the working location moves to its parent."""
        execute_line(ctx, "cd /content/articles/first")
        execute_line(ctx, "rm /content/articles")
        assert ctx.session.cwd == "/content"

    def test_rm_root(self, ctx):
        """The root cannot be removed."""
        execute_line(ctx, "rm /")
        assert "root node cannot be removed" in output(ctx)


class TestSessionCommands:
    """Tests for save, refresh, info, workspace and ns."""

    def test_save(self, ctx, repository):
        """save commits pending changes."""
        execute_line(ctx, "mkdir /news")
        execute_line(ctx, "save")
        assert repository.login().node_exists("/news")
        assert "Saved" in output(ctx)

    def test_refresh(self, ctx):
        """refresh discards changes, --keep keeps them."""
        execute_line(ctx, "mkdir /news")
        execute_line(ctx, "refresh --keep")
        assert ctx.session.node_exists("/news")
        execute_line(ctx, "refresh")
        assert not ctx.session.node_exists("/news")

    def test_refresh_resets_vanished_cwd(self, ctx):
        """A cwd that only existed unsaved falls back to the root."""
        execute_line(ctx, "mkdir /news")
        execute_line(ctx, "cd /news")
        execute_line(ctx, "refresh")
        assert ctx.session.cwd == "/"

    def test_info(self, ctx):
        """info shows session details."""
        execute_line(ctx, "cd /content")
        execute_line(ctx, "info")
        text = output(ctx)
        assert "embedded" in text
        assert "admin" in text
        assert "/content" in text

    def test_workspace_list(self, standalone_ctx):
        """The current workspace is marked."""
        execute_line(standalone_ctx, "workspace")
        lines = output(standalone_ctx).splitlines()
        assert "* default" in lines
        assert "  staging" in lines

    def test_workspace_use(self, standalone_ctx):
        """workspace use switches and resets the cwd."""
        execute_line(standalone_ctx, "cd /content")
        execute_line(standalone_ctx, "workspace use staging")
        assert standalone_ctx.session.get_workspace().name == "staging"
        assert standalone_ctx.session.cwd == "/"

    def test_workspace_use_with_pending_changes(self, standalone_ctx):
        """Unsaved changes block a switch."""
        execute_line(standalone_ctx, "mkdir /draft")
        execute_line(standalone_ctx, "workspace use staging")
        assert "Save or refresh" in output(standalone_ctx)
        assert standalone_ctx.session.get_workspace().name == "default"

    def test_workspace_use_embedded(self, ctx, repository):
        """Embedded shells cannot switch workspaces."""
        repository.create_workspace("staging")
        execute_line(ctx, "workspace use staging")
        assert "not available in embedded mode" in output(ctx)

    def test_workspace_create_and_delete(self, standalone_ctx):
        """Workspaces can be created from a source and deleted."""
        execute_line(standalone_ctx, "workspace create copy default")
        names = standalone_ctx.session.get_workspace().get_accessible_workspace_names()
        assert "copy" in names
        execute_line(standalone_ctx, "workspace delete copy")
        names = standalone_ctx.session.get_workspace().get_accessible_workspace_names()
        assert "copy" not in names

    def test_workspace_create_invalid_name(self, standalone_ctx):
        """Workspace names are validated."""
        execute_line(standalone_ctx, "workspace create ../x")
        assert "Workspace name may only contain" in output(standalone_ctx)

    def test_ns(self, ctx):
        """ns set registers a prefix that ns list shows."""
        execute_line(ctx, "ns set ex http://example.com/ns")
        execute_line(ctx, "ns")
        assert "http://example.com/ns" in output(ctx)


class TestImportExportCommands:
    """Tests for export and import."""

    def test_export_import_round_trip(self, ctx, tmp_path):
        """An exported subtree can be imported elsewhere."""
        xml_file = tmp_path / "first.xml"
        execute_line(ctx, f"export /content/articles/first {xml_file}")
        assert xml_file.read_text().startswith("<sv:node")

        execute_line(ctx, f"import /archive {xml_file}")

        assert ctx.session.get_property("/archive/first/title").value == "First"

    def test_export_document_view(self, ctx, tmp_path):
        """--document writes document view."""
        xml_file = tmp_path / "first.xml"
        execute_line(ctx, f"export /content/articles/first {xml_file} --document")
        assert xml_file.read_text().startswith("<first")

    def test_export_missing_node(self, ctx, tmp_path):
        """Exporting a missing node creates no file."""
        xml_file = tmp_path / "none.xml"
        execute_line(ctx, f"export /none {xml_file}")
        assert not xml_file.exists()
        assert "No item at path: /none" in output(ctx)

    def test_import_uuid_throw(self, ctx, tmp_path):
        """--uuid=throw refuses identifier collisions."""
        xml_file = tmp_path / "first.xml"
        execute_line(ctx, f"export /content/articles/first {xml_file}")
        execute_line(ctx, f"import /archive {xml_file} --uuid=throw")
        assert "Item already exists" in output(ctx)

    def test_import_missing_file(self, ctx, tmp_path):
        """A missing file is reported, not raised."""
        execute_line(ctx, f"import /archive {tmp_path / 'missing.xml'}")
        assert "Error:" in output(ctx)


class TestDispatch:
    """Tests for dispatch, aliases and exit."""

    def test_unknown_command(self, ctx):
        """Unknown commands point to help."""
        execute_line(ctx, "teleport /content")
        assert "Unknown command: teleport" in output(ctx)

    def test_blank_line(self, ctx):
        """Blank lines do nothing."""
        result = execute_line(ctx, "   ")
        assert result.action == CommandAction.CONTINUE
        assert ctx.state.history == []

    def test_alias(self, ctx):
        """Aliases expand before dispatch and are recorded expanded."""
        execute_line(ctx, "ll /content")
        assert "articles/" in output(ctx)
        assert ctx.state.history == ["ls -l /content"]

    def test_help(self, ctx):
        """help lists commands and aliases."""
        execute_line(ctx, "help")
        text = output(ctx)
        assert "mkdir <path> [type]" in text
        assert "ll = ls -l {arg}" in text

    def test_unexpected_error(self, ctx, monkeypatch):
        """Crashing handlers are reported and the shell continues."""

        def cmd_boom(ctx, args):
            raise RuntimeError("kaboom")

        monkeypatch.setitem(COMMANDS, "boom", cmd_boom)
        result = execute_line(ctx, "boom")
        assert result.action == CommandAction.CONTINUE
        assert "RuntimeError: kaboom" in output(ctx)

    def test_exit(self, ctx):
        """exit and quit end the shell."""
        assert execute_line(ctx, "exit").action == CommandAction.BREAK
        assert execute_line(ctx, "quit").action == CommandAction.BREAK

    def test_exit_with_unsaved_changes(self, ctx):
        """Unsaved changes need a second exit."""
        execute_line(ctx, "mkdir /news")
        assert execute_line(ctx, "exit").action == CommandAction.CONTINUE
        assert "unsaved changes" in output(ctx)
        assert execute_line(ctx, "exit").action == CommandAction.BREAK
