"""
test_archive — packing the staging tree and listing the result.
"""
import shutil
import tarfile

import pytest

from stage3.core.archive import create_tarball, list_tarball
from stage3.core.errors import ArchiveError, BuildError


@pytest.fixture
def staging(tmp_path):
    root = tmp_path / "staging"
    (root / "usr/bin").mkdir(parents=True)
    (root / "usr/bin/bash").write_text("bash\n")
    (root / "etc").mkdir()
    (root / "etc/hostname").write_text("levitateos\n")
    return root


class TestCreateTarball:

    def test_xz_tarball(self, tmp_path, staging):
        if shutil.which("tar") is None or shutil.which("xz") is None:
            pytest.skip("tar with xz support not available")
        tarball = tmp_path / "out/levitateos-stage3.tar.xz"

        assert create_tarball(staging, tarball) == tarball

        names = list_tarball(tarball)
        assert "./usr/bin/bash" in names
        assert "./etc/hostname" in names

    def test_failing_command(self, tmp_path, staging):
        with pytest.raises(ArchiveError, match="exited with 1"):
            create_tarball(staging, tmp_path / "out.tar.xz", command=("false",))

    def test_missing_command(self, tmp_path, staging):
        with pytest.raises(ArchiveError, match="Failed to run"):
            create_tarball(staging, tmp_path / "out.tar.xz", command=("stage3-no-such-tar",))

    def test_success_without_output(self, tmp_path, staging):
        with pytest.raises(ArchiveError, match="missing"):
            create_tarball(staging, tmp_path / "out.tar.xz", command=("true",))

    def test_archive_error_is_build_error(self):
        assert issubclass(ArchiveError, BuildError)


class TestListTarball:

    def test_lists_members_in_order(self, tmp_path, staging):
        tarball = tmp_path / "stage3.tar.xz"
        with tarfile.open(tarball, "w:xz") as tf:
            tf.add(staging / "etc/hostname", arcname="./etc/hostname")
            tf.add(staging / "usr/bin/bash", arcname="./usr/bin/bash")

        assert list_tarball(tarball) == ["./etc/hostname", "./usr/bin/bash"]

    def test_missing_tarball(self, tmp_path):
        with pytest.raises(ArchiveError, match="not found"):
            list_tarball(tmp_path / "nope.tar.xz")

    def test_not_a_tarball(self, tmp_path):
        bogus = tmp_path / "bogus.tar.xz"
        bogus.write_text("definitely not an archive")
        with pytest.raises(ArchiveError, match="Cannot read"):
            list_tarball(bogus)
