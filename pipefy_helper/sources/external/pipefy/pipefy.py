import logging
from typing import Any, Dict, List, Optional

from pipefy_helper.sources.client.graphql.response import GraphQLResponse
from pipefy_helper.sources.client.pipefy.graphql_op import PipefyGraphQLOperations
from pipefy_helper.sources.client.pipefy.pipefy import PipefyClient
from pipefy_helper.utils.logger import create_logger


def _with_optional(variables: Dict[str, Any], **optional: Any) -> Dict[str, Any]:
    """Add the optional variables that were actually given."""
    for name, value in optional.items():
        if value is not None:
            variables[name] = value
    return variables


class PipefyDataSource:
    """Pipefy GraphQL API wrapper
    One coroutine per Pipefy operation used by pipefy-helper. Every method
    returns the GraphQLResponse of the call; unexpected failures are turned
    into GraphQLResponse(success=False) instead of being raised.
    Coverage:
    - Queries: users, organizations, pipes, phases, cards, tables, records
    - Mutations: organization, pipe, phase, field, label, card, comment,
      relation, webhook, table and record management
    """

    def __init__(self, pipefy_client: PipefyClient, logger: Optional[logging.Logger] = None) -> None:
        """Initialize the Pipefy GraphQL data source.

        Args:
            pipefy_client (PipefyClient): Pipefy client instance
            logger: Optional logger, defaults to the pipefy_helper.data_source logger
        """
        self._pipefy_client = pipefy_client
        self.logger = logger or create_logger("data_source")

    async def _execute(
        self,
        operation_type: str,
        operation_name: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        query = PipefyGraphQLOperations.get_operation_with_fragments(operation_type, operation_name)
        try:
            return await self._pipefy_client.get_client().execute(
                query=query, variables=variables or {}, operation_name=operation_name,
            )
        except Exception as e:
            self.logger.error("Pipefy %s %s raised: %s", operation_type, operation_name, e)
            return GraphQLResponse(
                success=False,
                message=f"Failed to execute {operation_type} {operation_name}: {e!s}",
            )

    # =============================================================================
    # QUERY OPERATIONS
    # =============================================================================

    # USER & ORGANIZATION QUERIES
    async def me(self) -> GraphQLResponse:
        """Get the authenticated user"""
        return await self._execute("query", "me")

    async def organizations(self) -> GraphQLResponse:
        """List organizations visible to the token"""
        return await self._execute("query", "organizations")

    async def organization(self, id: str) -> GraphQLResponse:
        """Get organization by ID with its pipes and tables"""
        return await self._execute("query", "organization", {"id": id})

    async def organization_tables(
        self,
        id: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> GraphQLResponse:
        """Get one page of the tables of an organization"""
        variables = _with_optional({"id": id}, first=first, after=after)
        return await self._execute("query", "organization_tables", variables)

    # PIPE & PHASE QUERIES
    async def pipes(self, ids: List[str]) -> GraphQLResponse:
        """Get pipes by IDs"""
        return await self._execute("query", "pipes", {"ids": ids})

    async def pipe(self, id: str) -> GraphQLResponse:
        """Get pipe by ID"""
        return await self._execute("query", "pipe", {"id": id})

    async def phase(self, id: str) -> GraphQLResponse:
        """Get phase by ID"""
        return await self._execute("query", "phase", {"id": id})

    async def pipe_relations(self, ids: List[str]) -> GraphQLResponse:
        """Get pipe relations by IDs"""
        return await self._execute("query", "pipe_relations", {"ids": ids})

    # CARD QUERIES
    async def cards(
        self,
        pipe_id: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> GraphQLResponse:
        """Get one page of cards of a pipe"""
        variables = _with_optional({"pipe_id": pipe_id}, first=first, after=after)
        return await self._execute("query", "cards", variables)

    async def card(self, id: str) -> GraphQLResponse:
        """Get card by ID"""
        return await self._execute("query", "card", {"id": id})

    async def phase_cards(
        self,
        phase_id: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> GraphQLResponse:
        """Get one page of cards of a phase"""
        variables = _with_optional({"phaseId": phase_id}, first=first, after=after)
        return await self._execute("query", "phase_cards", variables)

    async def phase_cards_count(self, phase_id: str) -> GraphQLResponse:
        """Count the cards of a phase"""
        return await self._execute("query", "phase_cards_count", {"phaseId": phase_id})

    async def all_cards(
        self,
        pipe_id: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> GraphQLResponse:
        """Get one page of all cards of a pipe, with their fields"""
        variables = _with_optional({"pipeId": pipe_id}, first=first, after=after)
        return await self._execute("query", "all_cards", variables)

    async def pipe_cards_count(self, pipe_id: str) -> GraphQLResponse:
        """Count the cards of a pipe"""
        return await self._execute("query", "pipe_cards_count", {"pipeId": pipe_id})

    # TABLE QUERIES
    async def table(self, id: str) -> GraphQLResponse:
        """Get table by ID with fields and organization"""
        return await self._execute("query", "table", {"id": id})

    async def table_fields(self, id: str) -> GraphQLResponse:
        """Get the fields of a table"""
        return await self._execute("query", "table_fields", {"id": id})

    async def table_records(
        self,
        table_id: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
        search: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """Get one page of records of a table

        Args:
            table_id: Table to read
            first: Page size
            after: Cursor of the previous page
            search: TableRecordSearch input, e.g. {"ignore_ids": [...]}
        """
        variables = _with_optional({"table_id": table_id}, first=first, after=after, search=search)
        return await self._execute("query", "table_records", variables)

    async def table_records_count(self, table_id: str) -> GraphQLResponse:
        """Count the records of a table"""
        return await self._execute("query", "table_records_count", {"id": table_id})

    # =============================================================================
    # MUTATION OPERATIONS
    # =============================================================================

    # ORGANIZATION MUTATIONS
    async def create_organization(self, name: str, industry: str) -> GraphQLResponse:
        """Create an organization"""
        return await self._execute("mutation", "createOrganization", {"name": name, "industry": industry})

    async def update_organization(
        self,
        id: str,
        name: str,
        only_admin_can_create_pipes: Optional[bool] = None,
        only_admin_can_invite_users: Optional[bool] = None,
        force_omniauth_to_normal_users: Optional[bool] = None,
    ) -> GraphQLResponse:
        """Update an organization"""
        variables = _with_optional(
            {"id": id, "name": name},
            only_admin_can_create_pipes=only_admin_can_create_pipes,
            only_admin_can_invite_users=only_admin_can_invite_users,
            force_omniauth_to_normal_users=force_omniauth_to_normal_users,
        )
        return await self._execute("mutation", "updateOrganization", variables)

    async def delete_organization(self, id: str) -> GraphQLResponse:
        """Delete an organization"""
        return await self._execute("mutation", "deleteOrganization", {"id": id})

    # PIPE MUTATIONS
    async def clone_pipes(self, organization_id: str, pipe_template_ids: List[str]) -> GraphQLResponse:
        """Clone pipes from templates into an organization"""
        variables = {"organization_id": organization_id, "pipe_template_ids": pipe_template_ids}
        return await self._execute("mutation", "clonePipes", variables)

    async def create_pipe(
        self,
        name: str,
        organization_id: str,
        labels: Optional[List[Dict[str, Any]]] = None,
        members: Optional[List[Dict[str, Any]]] = None,
        phases: Optional[List[Dict[str, Any]]] = None,
        preferences: Optional[Dict[str, Any]] = None,
        start_form_fields: Optional[List[Dict[str, Any]]] = None,
    ) -> GraphQLResponse:
        """Create a pipe"""
        variables = _with_optional(
            {"name": name, "organization_id": organization_id},
            labels=labels,
            members=members,
            phases=phases,
            preferences=preferences,
            start_form_fields=start_form_fields,
        )
        return await self._execute("mutation", "createPipe", variables)

    async def update_pipe(
        self,
        id: str,
        name: Optional[str] = None,
        anyone_can_create_card: Optional[bool] = None,
        expiration_time_by_unit: Optional[int] = None,
        expiration_unit: Optional[int] = None,
        icon: Optional[str] = None,
        only_assignees_can_edit_cards: Optional[bool] = None,
        only_admin_can_remove_cards: Optional[bool] = None,
        preferences: Optional[Dict[str, Any]] = None,
        public: Optional[bool] = None,
        public_form: Optional[bool] = None,
        public_form_settings: Optional[Dict[str, Any]] = None,
        title_field_id: Optional[str] = None,
    ) -> GraphQLResponse:
        """Update a pipe"""
        variables = _with_optional(
            {"id": id},
            name=name,
            anyone_can_create_card=anyone_can_create_card,
            expiration_time_by_unit=expiration_time_by_unit,
            expiration_unit=expiration_unit,
            icon=icon,
            only_assignees_can_edit_cards=only_assignees_can_edit_cards,
            only_admin_can_remove_cards=only_admin_can_remove_cards,
            preferences=preferences,
            public=public,
            public_form=public_form,
            publicFormSettings=public_form_settings,
            title_field_id=title_field_id,
        )
        return await self._execute("mutation", "updatePipe", variables)

    async def delete_pipe(self, id: str) -> GraphQLResponse:
        """Delete a pipe"""
        return await self._execute("mutation", "deletePipe", {"id": id})

    # PHASE MUTATIONS
    async def create_phase(
        self,
        pipe_id: str,
        name: str,
        description: Optional[str] = None,
        done: Optional[bool] = None,
        lateness_time: Optional[int] = None,
        can_receive_card_directly_from_draft: Optional[bool] = None,
        only_admin_can_move_to_previous: Optional[bool] = None,
    ) -> GraphQLResponse:
        """Create a phase in a pipe"""
        variables = _with_optional(
            {"pipe_id": pipe_id, "name": name},
            description=description,
            done=done,
            lateness_time=lateness_time,
            can_receive_card_directly_from_draft=can_receive_card_directly_from_draft,
            only_admin_can_move_to_previous=only_admin_can_move_to_previous,
        )
        return await self._execute("mutation", "createPhase", variables)

    async def update_phase(
        self,
        id: str,
        name: str,
        description: Optional[str] = None,
        done: Optional[bool] = None,
        lateness_time: Optional[int] = None,
        can_receive_card_directly_from_draft: Optional[bool] = None,
    ) -> GraphQLResponse:
        """Update a phase"""
        variables = _with_optional(
            {"id": id, "name": name},
            description=description,
            done=done,
            lateness_time=lateness_time,
            can_receive_card_directly_from_draft=can_receive_card_directly_from_draft,
        )
        return await self._execute("mutation", "updatePhase", variables)

    async def delete_phase(self, id: str) -> GraphQLResponse:
        """Delete a phase"""
        return await self._execute("mutation", "deletePhase", {"id": id})

    # PHASE FIELD MUTATIONS
    async def create_phase_field(
        self,
        phase_id: str,
        type: str,
        label: str,
        settings: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """Create a phase field

        Args:
            phase_id: Phase receiving the field
            type: Field type id, e.g. "short_text"
            label: Field label
            settings: Any further createPhaseField input, e.g. {"required": True, "options": [...]}
        """
        variables = {**(settings or {}), "phase_id": phase_id, "type": type, "label": label}
        return await self._execute("mutation", "createPhaseField", variables)

    async def update_phase_field(
        self,
        id: str,
        label: str,
        settings: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """Update a phase field; ``settings`` carries the remaining updatePhaseField input"""
        variables = {**(settings or {}), "id": id, "label": label}
        return await self._execute("mutation", "updatePhaseField", variables)

    async def delete_phase_field(self, id: str) -> GraphQLResponse:
        """Delete a phase field"""
        return await self._execute("mutation", "deletePhaseField", {"id": id})

    # LABEL MUTATIONS
    async def create_label(
        self,
        name: str,
        color: str,
        pipe_id: Optional[str] = None,
        table_id: Optional[str] = None,
    ) -> GraphQLResponse:
        """Create a label on a pipe or a table"""
        variables = _with_optional({"name": name, "color": color}, pipe_id=pipe_id, table_id=table_id)
        return await self._execute("mutation", "createLabel", variables)

    async def update_label(self, id: str, name: str, color: str) -> GraphQLResponse:
        """Update a label"""
        return await self._execute("mutation", "updateLabel", {"id": id, "name": name, "color": color})

    async def delete_label(self, id: str) -> GraphQLResponse:
        """Delete a label"""
        return await self._execute("mutation", "deleteLabel", {"id": id})

    # CARD MUTATIONS
    async def create_card(
        self,
        pipe_id: str,
        title: Optional[str] = None,
        phase_id: Optional[str] = None,
        fields_attributes: Optional[List[Dict[str, Any]]] = None,
        assignee_ids: Optional[List[str]] = None,
        label_ids: Optional[List[str]] = None,
        parent_ids: Optional[List[str]] = None,
        attachments: Optional[List[str]] = None,
        due_date: Optional[str] = None,
    ) -> GraphQLResponse:
        """Create a card"""
        variables = _with_optional(
            {"pipe_id": pipe_id},
            title=title,
            phase_id=phase_id,
            fields_attributes=fields_attributes,
            assignee_ids=assignee_ids,
            label_ids=label_ids,
            parent_ids=parent_ids,
            attachments=attachments,
            due_date=due_date,
        )
        return await self._execute("mutation", "createCard", variables)

    async def update_card(
        self,
        id: str,
        title: Optional[str] = None,
        assignee_ids: Optional[List[str]] = None,
        label_ids: Optional[List[str]] = None,
        due_date: Optional[str] = None,
    ) -> GraphQLResponse:
        """Update a card"""
        variables = _with_optional(
            {"id": id},
            title=title,
            assignee_ids=assignee_ids,
            label_ids=label_ids,
            due_date=due_date,
        )
        return await self._execute("mutation", "updateCard", variables)

    async def delete_card(self, id: str) -> GraphQLResponse:
        """Delete a card"""
        return await self._execute("mutation", "deleteCard", {"id": id})

    async def move_card_to_phase(self, card_id: str, destination_phase_id: str) -> GraphQLResponse:
        """Move a card to another phase"""
        variables = {"card_id": card_id, "destination_phase_id": destination_phase_id}
        return await self._execute("mutation", "moveCardToPhase", variables)

    async def update_card_field(self, card_id: str, field_id: str, new_value: Any) -> GraphQLResponse:
        """Update the value of one card field"""
        variables = {"card_id": card_id, "field_id": field_id, "new_value": new_value}
        return await self._execute("mutation", "updateCardField", variables)

    async def create_card_relation(
        self,
        parent_id: str,
        child_id: str,
        source_id: str,
        source_type: str = "PipeRelation",
    ) -> GraphQLResponse:
        """Connect a child card to a parent card"""
        variables = {
            "parentId": parent_id,
            "childId": child_id,
            "sourceId": source_id,
            "sourceType": source_type,
        }
        return await self._execute("mutation", "createCardRelation", variables)

    # COMMENT MUTATIONS
    async def create_comment(self, card_id: str, text: str) -> GraphQLResponse:
        """Comment on a card"""
        return await self._execute("mutation", "createComment", {"card_id": card_id, "text": text})

    async def update_comment(self, id: str, text: str) -> GraphQLResponse:
        """Update a comment"""
        return await self._execute("mutation", "updateComment", {"id": id, "text": text})

    async def delete_comment(self, id: str) -> GraphQLResponse:
        """Delete a comment"""
        return await self._execute("mutation", "deleteComment", {"id": id})

    # MEMBER MUTATIONS
    async def set_role(
        self,
        member: Dict[str, Any],
        organization_id: Optional[str] = None,
        pipe_id: Optional[str] = None,
        table_id: Optional[str] = None,
    ) -> GraphQLResponse:
        """Set the role of a member, e.g. member={"user_id": "1", "role_name": "admin"}"""
        variables = _with_optional(
            {"member": member},
            organization_id=organization_id,
            pipe_id=pipe_id,
            table_id=table_id,
        )
        return await self._execute("mutation", "setRole", variables)

    # PIPE RELATION MUTATIONS
    @staticmethod
    def _relation_variables(
        name: str,
        auto_fill_field_enabled: bool,
        all_children_must_be_done_to_move_parent: bool,
        all_children_must_be_done_to_finish_parent: bool,
        can_connect_multiple_items: bool,
        can_connect_existing_items: bool,
        can_create_new_items: bool,
        child_must_exist_to_move_parent: bool,
        child_must_exist_to_finish_parent: bool,
        own_field_maps: Optional[List[Dict[str, Any]]],
    ) -> Dict[str, Any]:
        return _with_optional(
            {
                "name": name,
                "autoFillFieldEnabled": auto_fill_field_enabled,
                "allChildrenMustBeDoneToMoveParent": all_children_must_be_done_to_move_parent,
                "allChildrenMustBeDoneToFinishParent": all_children_must_be_done_to_finish_parent,
                "canConnectMultipleItems": can_connect_multiple_items,
                "canConnectExistingItems": can_connect_existing_items,
                "canCreateNewItems": can_create_new_items,
                "childMustExistToMoveParent": child_must_exist_to_move_parent,
                "childMustExistToFinishParent": child_must_exist_to_finish_parent,
            },
            ownFieldMaps=own_field_maps,
        )

    async def create_pipe_relation(
        self,
        parent_id: str,
        child_id: str,
        name: str,
        auto_fill_field_enabled: bool = False,
        all_children_must_be_done_to_move_parent: bool = False,
        all_children_must_be_done_to_finish_parent: bool = False,
        can_connect_multiple_items: bool = True,
        can_connect_existing_items: bool = True,
        can_create_new_items: bool = True,
        child_must_exist_to_move_parent: bool = False,
        child_must_exist_to_finish_parent: bool = False,
        own_field_maps: Optional[List[Dict[str, Any]]] = None,
    ) -> GraphQLResponse:
        """Create a relation between two pipes"""
        variables = self._relation_variables(
            name,
            auto_fill_field_enabled,
            all_children_must_be_done_to_move_parent,
            all_children_must_be_done_to_finish_parent,
            can_connect_multiple_items,
            can_connect_existing_items,
            can_create_new_items,
            child_must_exist_to_move_parent,
            child_must_exist_to_finish_parent,
            own_field_maps,
        )
        variables.update({"parentId": parent_id, "childId": child_id})
        return await self._execute("mutation", "createPipeRelation", variables)

    async def update_pipe_relation(
        self,
        id: str,
        name: str,
        auto_fill_field_enabled: bool = False,
        all_children_must_be_done_to_move_parent: bool = False,
        all_children_must_be_done_to_finish_parent: bool = False,
        can_connect_multiple_items: bool = True,
        can_connect_existing_items: bool = True,
        can_create_new_items: bool = True,
        child_must_exist_to_move_parent: bool = False,
        child_must_exist_to_finish_parent: bool = False,
        own_field_maps: Optional[List[Dict[str, Any]]] = None,
    ) -> GraphQLResponse:
        """Update a pipe relation"""
        variables = self._relation_variables(
            name,
            auto_fill_field_enabled,
            all_children_must_be_done_to_move_parent,
            all_children_must_be_done_to_finish_parent,
            can_connect_multiple_items,
            can_connect_existing_items,
            can_create_new_items,
            child_must_exist_to_move_parent,
            child_must_exist_to_finish_parent,
            own_field_maps,
        )
        variables["id"] = id
        return await self._execute("mutation", "updatePipeRelation", variables)

    async def delete_pipe_relation(self, id: str) -> GraphQLResponse:
        """Delete a pipe relation"""
        return await self._execute("mutation", "deletePipeRelation", {"id": id})

    # WEBHOOK MUTATIONS
    async def create_webhook(
        self,
        actions: List[str],
        name: str,
        url: str,
        pipe_id: Optional[str] = None,
        table_id: Optional[str] = None,
        email: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """Create a webhook on a pipe or a table"""
        variables = _with_optional(
            {"actions": actions, "name": name, "url": url},
            pipe_id=pipe_id,
            table_id=table_id,
            email=email,
            headers=headers,
        )
        return await self._execute("mutation", "createWebhook", variables)

    async def update_webhook(
        self,
        id: str,
        actions: Optional[List[str]] = None,
        url: Optional[str] = None,
        email: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ) -> GraphQLResponse:
        """Update a webhook"""
        variables = _with_optional({"id": id}, actions=actions, url=url, email=email, headers=headers)
        return await self._execute("mutation", "updateWebhook", variables)

    async def delete_webhook(self, id: str) -> GraphQLResponse:
        """Delete a webhook"""
        return await self._execute("mutation", "deleteWebhook", {"id": id})

    # TABLE MUTATIONS
    async def create_table(
        self,
        organization_id: str,
        name: str,
        description: Optional[str] = None,
        public: Optional[bool] = None,
        authorization: Optional[str] = None,
        labels: Optional[List[Dict[str, Any]]] = None,
        members: Optional[List[Dict[str, Any]]] = None,
    ) -> GraphQLResponse:
        """Create a table in an organization"""
        variables = _with_optional(
            {"organization_id": organization_id, "name": name},
            description=description,
            public=public,
            authorization=authorization,
            labels=labels,
            members=members,
        )
        return await self._execute("mutation", "createTable", variables)

    async def delete_table(self, id: str) -> GraphQLResponse:
        """Delete a table"""
        return await self._execute("mutation", "deleteTable", {"id": id})

    async def create_table_field(
        self,
        table_id: str,
        type: str,
        label: str,
        description: Optional[str] = None,
        required: Optional[bool] = None,
        options: Optional[List[str]] = None,
        help: Optional[str] = None,
        minimal_view: Optional[bool] = None,
        custom_validation: Optional[str] = None,
    ) -> GraphQLResponse:
        """Create a field in a table"""
        variables = _with_optional(
            {"table_id": table_id, "type": type, "label": label},
            description=description,
            required=required,
            options=options,
            help=help,
            minimal_view=minimal_view,
            custom_validation=custom_validation,
        )
        return await self._execute("mutation", "createTableField", variables)

    async def create_table_record(
        self,
        table_id: str,
        title: str,
        fields_attributes: Optional[List[Dict[str, Any]]] = None,
        due_date: Optional[str] = None,
        label_ids: Optional[List[str]] = None,
        assignee_ids: Optional[List[str]] = None,
    ) -> GraphQLResponse:
        """Create a record in a table

        Args:
            table_id: Table receiving the record
            title: Record title
            fields_attributes: [{"field_id": ..., "field_value": ...}, ...]
        """
        variables = _with_optional(
            {"table_id": table_id, "title": title},
            fields_attributes=fields_attributes,
            due_date=due_date,
            label_ids=label_ids,
            assignee_ids=assignee_ids,
        )
        return await self._execute("mutation", "createTableRecord", variables)

    async def delete_table_record(self, id: str) -> GraphQLResponse:
        """Delete a table record"""
        return await self._execute("mutation", "deleteTableRecord", {"id": id})

    async def set_table_record_field_value(
        self,
        table_record_id: str,
        field_id: str,
        value: Any,
    ) -> GraphQLResponse:
        """Set the value of one field of a table record"""
        variables = {"table_record_id": table_record_id, "field_id": field_id, "value": value}
        return await self._execute("mutation", "setTableRecordFieldValue", variables)

    # =============================================================================
    # RAW OPERATIONS
    # =============================================================================

    async def custom_query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> GraphQLResponse:
        """Run an arbitrary GraphQL document against the Pipefy endpoint"""
        try:
            return await self._pipefy_client.get_client().execute(
                query=query, variables=variables or {}, operation_name=operation_name,
            )
        except Exception as e:
            self.logger.error("Pipefy custom query raised: %s", e)
            return GraphQLResponse(success=False, message=f"Failed to execute custom query: {e!s}")
