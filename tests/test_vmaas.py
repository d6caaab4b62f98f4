import pytest

from patchcore.vmaas import (
    ErrataRequest,
    ErrataResponse,
    PkgListRequest,
    PkgListResponse,
    ReposRequest,
    ReposResponse,
    UpdatesV2Response,
    UpdatesV2ResponseAvailableUpdates,
    UpdatesV2ResponseUpdateList,
    UpdatesV3Request,
    UpdatesV3RequestModulesList,
)

UPDATE = {
    "package": "pkgA-0:1.0-1.x86_64",
    "erratum": "RHSA-9999:0001",
    "repository": "rhel-8-for-x86_64-baseos-rpms",
    "basearch": "x86_64",
    "releasever": "8",
}


def test_available_update_round_trip():
    assert UpdatesV2ResponseAvailableUpdates.from_dict(UPDATE).to_dict() == UPDATE


def test_available_update_omits_missing_fields():
    data = {"package": "bash-0:4.4.23-1.el8_4.x86_64"}
    assert UpdatesV2ResponseAvailableUpdates.from_dict(data).to_dict() == data


def test_cmp_equal_updates():
    a = UpdatesV2ResponseAvailableUpdates.from_dict(UPDATE)
    b = UpdatesV2ResponseAvailableUpdates.from_dict(dict(UPDATE))
    assert a.cmp(b) == 0


@pytest.mark.parametrize("field_name", ["package", "erratum", "repository", "basearch", "releasever"])
def test_cmp_each_field_is_antisymmetric(field_name):
    a = UpdatesV2ResponseAvailableUpdates.from_dict(UPDATE)
    b = UpdatesV2ResponseAvailableUpdates.from_dict({**UPDATE, field_name: "zzz"})
    assert a.cmp(b) < 0
    assert b.cmp(a) > 0
    assert a.cmp(b) == -b.cmp(a)


def test_cmp_package_takes_precedence_over_erratum():
    a = UpdatesV2ResponseAvailableUpdates(package="a", erratum="z")
    b = UpdatesV2ResponseAvailableUpdates(package="b", erratum="a")
    assert a.cmp(b) < 0


def test_cmp_missing_equals_empty():
    assert UpdatesV2ResponseAvailableUpdates().cmp(UpdatesV2ResponseAvailableUpdates(package="")) == 0


def test_update_list_missing_vs_empty():
    assert UpdatesV2ResponseUpdateList.from_dict({}).available_updates is None
    assert UpdatesV2ResponseUpdateList.from_dict({}).to_dict() == {}
    empty = {"available_updates": []}
    assert UpdatesV2ResponseUpdateList.from_dict(empty).to_dict() == empty


def test_response_round_trip_keeps_empty_lists():
    data = {
        "update_list": {"kernel-0:3.10.0-1160.42.2.el7.x86_64": {"available_updates": [UPDATE]}},
        "repository_list": ["rhel7"],
        "modules_list": [],
        "basearch": "x86_64",
        "releasever": "7Server",
    }
    response = UpdatesV2Response.from_dict(data)
    assert response.to_dict() == data
    assert response.modules_list == []


def test_response_modules_list_parsed():
    data = {"modules_list": [{"module_name": "nodejs", "module_stream": "12"}]}
    response = UpdatesV2Response.from_dict(data)
    assert response.modules_list == [UpdatesV3RequestModulesList("nodejs", "12")]
    assert response.to_dict() == data


def test_updates_request_package_list_always_present():
    request = UpdatesV3Request(package_list=["bash-0:4.4.20-1.el8_4.x86_64"])
    assert request.to_dict() == {"package_list": ["bash-0:4.4.20-1.el8_4.x86_64"]}
    assert UpdatesV3Request().to_dict() == {"package_list": []}


def test_updates_request_keeps_false_flags():
    request = UpdatesV3Request(package_list=["p"], security_only=False, repository_list=[])
    assert request.to_dict() == {"package_list": ["p"], "security_only": False, "repository_list": []}


def test_errata_request_omits_zero_page():
    request = ErrataRequest(errata_list=["RHSA-2021:3801"])
    assert request.to_dict() == {"errata_list": ["RHSA-2021:3801"]}
    paged = ErrataRequest(page=2, page_size=10, errata_list=["RHSA-2021:3801"], third_party=True)
    assert paged.to_dict() == {
        "page": 2,
        "page_size": 10,
        "errata_list": ["RHSA-2021:3801"],
        "third_party": True,
    }


def test_errata_response_from_dict():
    data = {
        "page": 1,
        "pages": 3,
        "errata_list": {
            "RHSA-2021:3801": {
                "synopsis": "kernel update",
                "requires_reboot": True,
                "cve_list": ["CVE-2021-1"],
                "package_list": ["kernel-0:3.10.1-1160.42.2.el7.x86_64"],
            }
        },
        "type": ["security"],
    }
    response = ErrataResponse.from_dict(data)
    assert response.page == 1
    assert response.pages == 3
    erratum = response.errata_list["RHSA-2021:3801"]
    assert erratum.synopsis == "kernel update"
    assert erratum.requires_reboot is True
    assert erratum.cve_list == ["CVE-2021-1"]
    assert erratum.solution is None
    assert erratum.to_dict() == data["errata_list"]["RHSA-2021:3801"]


def test_pkg_list_response_from_dict():
    data = {
        "page": 1,
        "total": 2,
        "last_change": "2021-01-01T12:00:00+00:00",
        "package_list": [
            {"nevra": "bash-0:4.4.20-1.el8_4.x86_64", "summary": "shell"},
            {"nevra": "kernel-0:3.10.1-1160.42.2.el7.x86_64"},
        ],
    }
    response = PkgListResponse.from_dict(data)
    assert [item.nevra for item in response.package_list] == [
        "bash-0:4.4.20-1.el8_4.x86_64",
        "kernel-0:3.10.1-1160.42.2.el7.x86_64",
    ]
    assert response.package_list[0].summary == "shell"
    assert response.total == 2
    assert response.last_change == "2021-01-01T12:00:00+00:00"


def test_pkg_list_request_to_dict():
    assert PkgListRequest(return_modified=True).to_dict() == {"return_modified": True}


def test_repos_round_trip():
    request = ReposRequest(repository_list=["rhel7"])
    assert request.to_dict() == {"repository_list": ["rhel7"]}
    data = {"repository_list": {"rhel7": [{"label": "rhel7", "third_party": False}]}, "pages": 1}
    response = ReposResponse.from_dict(data)
    assert response.repository_list == data["repository_list"]
    assert response.pages == 1
    assert response.last_change is None