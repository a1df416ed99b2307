import argparse
import io
import os

import pytest

from searchctl.profile_commands import (
    AWSIAM,
    Profile,
    ProfileError,
    Trust,
    add_profile_parser,
    check_config_permissions,
    create_profile,
    delete_profiles,
    format_profile_table,
    list_profiles,
    prompt_text,
    read_aws_iam_auth,
    read_basic_auth,
    read_certificate_auth,
    validate_profile_name,
)

PASSWORD = "password"


class FakeController:
    def __init__(self, profiles=(), failure=None):
        self.profiles = list(profiles)
        self.failure = failure
        self.created = []
        self.deleted = []

    def create_profile(self, profile):
        if self.failure is not None:
            raise self.failure
        self.created.append(profile)

    def delete_profiles(self, names):
        self.deleted.extend(names)

    def get_profiles(self):
        return list(self.profiles)

    def get_profile_names(self):
        return [p.name for p in self.profiles]

    def get_profiles_map(self):
        return {p.name: p for p in self.profiles}


def reader(*lines):
    it = iter(lines)
    return lambda: next(it)


def fake_input_profile():
    return Profile(name="default", endpoint="localhost:9200", user_name="admin", password=PASSWORD)


def fake_insecured_input_profile():
    return Profile(name="default", endpoint="localhost:9200")


def fake_aws_iam_input_profile():
    return Profile(name="default", endpoint="localhost:9200", aws=AWSIAM(profile_name="iam-test"))


def build_parser():
    parser = argparse.ArgumentParser(prog="searchctl")
    add_profile_parser(parser.add_subparsers(dest="command"))
    return parser


@pytest.mark.parametrize(
    "profile", [fake_input_profile(), fake_insecured_input_profile(), fake_aws_iam_input_profile()]
)
def test_create_profile_successfully(profile):
    controller = FakeController()
    create_profile(controller, profile)
    assert controller.created == [profile]


def test_create_profile_failed():
    controller = FakeController(failure=RuntimeError("error"))
    with pytest.raises(ProfileError) as info:
        create_profile(controller, fake_input_profile())
    assert str(info.value) == f"failed to create profile {fake_input_profile()} due to: error"


def test_create_requires_mandatory_flags():
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(["profile", "create"])
    assert info.value.code == 2


def test_create_security_disabled_profile(capsys):
    args = build_parser().parse_args(
        [
            "profile", "create",
            "--auth-type", "disabled",
            "--endpoint", "some-endpoint",
            "--name", "pname",
            "--max-retry", "2",
            "--timeout", "10",
        ]
    )
    controller = FakeController()
    args.run(args, controller)
    assert controller.created == [
        Profile(name="pname", endpoint="some-endpoint", max_retry=2, timeout=10)
    ]
    assert capsys.readouterr().out == "Profile created successfully.\n"


def test_create_uses_default_retry_and_timeout():
    args = build_parser().parse_args(
        ["profile", "create", "-a", "disabled", "-e", "some-endpoint", "-n", "pname"]
    )
    controller = FakeController()
    args.run(args, controller)
    assert (controller.created[0].max_retry, controller.created[0].timeout) == (3, 10)


def test_create_rejects_invalid_auth_type():
    args = build_parser().parse_args(
        ["profile", "create", "-a", "magic", "-e", "some-endpoint", "-n", "pname"]
    )
    controller = FakeController()
    with pytest.raises(ProfileError, match="invalid value for auth-type"):
        args.run(args, controller)
    assert controller.created == []


def test_create_rejects_existing_name():
    args = build_parser().parse_args(
        ["profile", "create", "-a", "disabled", "-e", "some-endpoint", "-n", "default"]
    )
    with pytest.raises(ProfileError, match="profile default already exists"):
        args.run(args, FakeController([fake_input_profile()]))


def test_validate_profile_name():
    controller = FakeController([fake_input_profile()])
    with pytest.raises(ProfileError) as info:
        validate_profile_name("default", controller)
    assert str(info.value) == "profile default already exists"


def test_delete_profile_command(capsys):
    args = build_parser().parse_args(["profile", "delete", "default"])
    controller = FakeController([fake_input_profile()])
    args.run(args, controller)
    assert controller.deleted == ["default"]
    assert capsys.readouterr().out == "Profile deleted successfully.\n"


def test_delete_profiles_passes_names():
    controller = FakeController()
    delete_profiles(controller, ("a", "b"))
    assert controller.deleted == ["a", "b"]


def test_list_profiles_names():
    out = io.StringIO()
    list_profiles(FakeController([fake_input_profile()]), False, out)
    assert out.getvalue() == "default\n"


def test_list_profiles_verbose():
    out = io.StringIO()
    list_profiles(FakeController([fake_input_profile()]), True, out)
    text = out.getvalue()
    assert text.splitlines()[0].split() == ["Name", "UserName", "Endpoint-url"]
    assert text.splitlines()[2].split() == ["default", "admin", "localhost:9200"]


@pytest.mark.parametrize("verbose", [False, True])
def test_no_profiles_found(verbose):
    with pytest.raises(ProfileError, match="no profiles found"):
        list_profiles(FakeController(), verbose, io.StringIO())


def test_list_command_verbose_flag(capsys):
    args = build_parser().parse_args(["profile", "list", "--verbose"])
    args.run(args, FakeController([fake_input_profile()]))
    assert "localhost:9200" in capsys.readouterr().out


def test_format_profile_table_alignment():
    profiles = [
        fake_input_profile(),
        Profile(name="dev", endpoint="https://127.0.0.1:9200", user_name="test"),
    ]
    lines = format_profile_table(profiles).splitlines()
    assert len(lines) == 4
    assert len({len(line) for line in lines}) == 1
    assert lines[0].index("UserName") == lines[2].index("admin") == lines[3].index("test")
    assert lines[0].index("Endpoint-url") == lines[3].index("https://127.0.0.1:9200")


def test_check_config_permissions_accepts_owner_only(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    os.chmod(path, 0o600)
    assert check_config_permissions(str(path)) == 0o600


def test_check_config_permissions_too_open(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    os.chmod(path, 0o750)
    with pytest.raises(ProfileError) as info:
        check_config_permissions(str(path))
    assert str(info.value) == (
        f"permissions 750 for '{path}' are too open. "
        "It is required that your config file is NOT accessible by others"
    )


def test_check_config_permissions_missing_file(tmp_path):
    missing = tmp_path / "config1.yaml"
    with pytest.raises(ProfileError) as info:
        check_config_permissions(str(missing))
    assert str(info.value).startswith("failed to get config file info due to:")


def test_prompt_text_retries_until_valid(capsys):
    result = prompt_text(reader("", "  alice  bob"), lambda value: bool(value))
    assert result == "alice"


def test_prompt_text_accepts_empty_without_validator():
    assert prompt_text(reader("")) == ""


def test_read_basic_auth(capsys):
    profile = read_basic_auth(fake_insecured_input_profile(), reader("", "admin"), reader("", PASSWORD))
    assert profile.user_name == "admin"
    assert profile.password == PASSWORD
    assert "Value cannot be empty" in capsys.readouterr().out


def test_read_aws_iam_auth(capsys):
    profile = read_aws_iam_auth(fake_insecured_input_profile(), reader("", "es"))
    assert profile.aws == AWSIAM(profile_name="", service_name="es")


def test_read_certificate_auth_full(capsys):
    profile = read_certificate_auth(
        fake_insecured_input_profile(), reader("client.pem", "client.key", "ca.pem")
    )
    assert profile.certificate == Trust(
        ca_file_path="ca.pem",
        client_certificate_file_path="client.pem",
        client_key_file_path="client.key",
    )


def test_read_certificate_auth_skips_key_without_certificate(capsys):
    profile = read_certificate_auth(fake_insecured_input_profile(), reader("", ""))
    assert profile.certificate == Trust()
    assert "Key file path" not in capsys.readouterr().out