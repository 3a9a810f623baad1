from avocat_assist.api.resources import LegalRequestsApi, ProjectsApi


async def test_projects_list_and_create(api, backend):
    backend.route("GET", "/projects", json={"projects": [{"id": 1, "title": "Bail"}]})
    backend.route("POST", "/projects", json={"project": {"id": 2, "title": "Divorce"}})
    projects = ProjectsApi(api)

    listed = await projects.list()
    created = await projects.create("Divorce", "Procédure amiable")

    assert [p.title for p in listed] == ["Bail"]
    assert created.id == 2
    assert backend.body(backend.calls("POST", "/projects")[0]) == {"title": "Divorce", "description": "Procédure amiable"}


async def test_legal_request_documents_and_proposals(api, backend):
    backend.route("GET", "/legal-requests/9", json={"legalRequest": {"id": 9, "title": "Licenciement"}})
    backend.route("GET", "/legal-requests/9/documents", json={"documents": [{"id": 4, "fileName": "lettre.pdf"}]})
    backend.route("GET", "/legal-requests/9/proposals", json=[{"id": 1, "legalRequestId": 9, "price": 450.0}])
    legal_requests = LegalRequestsApi(api)

    request = await legal_requests.get(9)
    documents = await legal_requests.documents(9)
    proposals = await legal_requests.proposals(9)

    assert request.title == "Licenciement"
    assert documents[0].file_name == "lettre.pdf"
    assert proposals[0].legal_request_id == 9
