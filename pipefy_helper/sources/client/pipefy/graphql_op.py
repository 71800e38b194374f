from typing import Any, Dict


class PipefyGraphQLOperations:
    """Registry of Pipefy GraphQL operations and fragments."""

    # Common fragments
    FRAGMENTS = {
        "PageInfoFields": """
            fragment PageInfoFields on PageInfo {
                endCursor
                hasNextPage
                hasPreviousPage
                startCursor
            }
        """,

        "TableFieldFields": """
            fragment TableFieldFields on TableField {
                id
                label
                type
                options
                description
                help
                required
                minimal_view
                custom_validation
                unique
            }
        """,

        "TableRecordFields": """
            fragment TableRecordFields on TableRecord {
                id
                title
                url
                record_fields {
                    name
                    value
                    date_value
                    datetime_value
                    array_value
                    field {
                        id
                    }
                }
            }
        """,

        "CardFields": """
            fragment CardFields on Card {
                id
                title
                assignees {
                    id
                }
                attachments_count
                checklist_items_checked_count
                checklist_items_count
                child_relations {
                    name
                    source_type
                }
                comments {
                    id
                    text
                    created_at
                    author_name
                }
                comments_count
                createdAt
                createdBy {
                    id
                    name
                }
                current_phase {
                    id
                    name
                    cards_can_be_moved_to_phases {
                        id
                        name
                    }
                }
                labels {
                    id
                    name
                }
                current_phase_age
                done
                due_date
                emailMessagingAddress
                expired
                fields {
                    name
                    value
                    field {
                        id
                        label
                        type
                        options
                        uuid
                    }
                }
            }
        """,

        "WebhookFields": """
            fragment WebhookFields on Webhook {
                id
                name
                actions
                url
                email
                headers
            }
        """,
    }

    # Query operations
    QUERIES = {
        "me": {
            "query": """
                query me {
                    me {
                        id
                        name
                        username
                        avatar_url
                        email
                        locale
                        time_zone
                    }
                }
            """,
            "fragments": [],
            "description": "Get information about the authenticated user"
        },

        "organizations": {
            "query": """
                query organizations {
                    organizations {
                        id
                        name
                        pipes {
                            name
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "List organizations"
        },

        "organization": {
            "query": """
                query organization($id: ID!) {
                    organization(id: $id) {
                        id
                        name
                        pipes {
                            id
                            name
                            phases {
                                name
                            }
                        }
                        tables {
                            edges {
                                node {
                                    id
                                    name
                                    organization {
                                        id
                                    }
                                }
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get an organization with its pipes, phases and tables"
        },

        "organization_tables": {
            "query": """
                query organization_tables($id: ID!, $first: Int, $after: String) {
                    organization(id: $id) {
                        id
                        tables(first: $first, after: $after) {
                            edges {
                                node {
                                    id
                                    name
                                    organization {
                                        id
                                    }
                                }
                            }
                            pageInfo {
                                ...PageInfoFields
                            }
                        }
                    }
                }
            """,
            "fragments": ["PageInfoFields"],
            "description": "Page through the tables of an organization"
        },

        "pipes": {
            "query": """
                query pipes($ids: [ID]!) {
                    pipes(ids: $ids) {
                        id
                        name
                        phases {
                            id
                            name
                            cards(first: 10) {
                                edges {
                                    node {
                                        id
                                        title
                                    }
                                }
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get pipes by ids with phases and first cards"
        },

        "pipe": {
            "query": """
                query pipe($id: ID!) {
                    pipe(id: $id) {
                        id
                        name
                        phases {
                            id
                            name
                            cards(first: 10) {
                                edges {
                                    node {
                                        id
                                        title
                                    }
                                }
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get a pipe with phases and first cards"
        },

        "phase": {
            "query": """
                query phase($id: ID!) {
                    phase(id: $id) {
                        id
                        name
                        cards_count
                        cards {
                            edges {
                                node {
                                    id
                                    title
                                }
                            }
                        }
                        fields {
                            id
                        }
                        cards_can_be_moved_to_phases {
                            id
                            name
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get a phase with cards, fields and allowed moves"
        },

        "cards": {
            "query": """
                query cards($pipe_id: ID!, $first: Int, $after: String) {
                    cards(pipe_id: $pipe_id, first: $first, after: $after) {
                        edges {
                            node {
                                id
                                title
                                assignees {
                                    id
                                    username
                                }
                                child_relations {
                                    name
                                    cards {
                                        id
                                    }
                                }
                                fields {
                                    name
                                    value
                                    phase_field {
                                        id
                                    }
                                    array_value
                                }
                                labels {
                                    id
                                    name
                                }
                            }
                        }
                        pageInfo {
                            ...PageInfoFields
                        }
                    }
                }
            """,
            "fragments": ["PageInfoFields"],
            "description": "Get one page of cards of a pipe"
        },

        "card": {
            "query": """
                query card($id: ID!) {
                    card(id: $id) {
                        id
                        title
                        current_phase {
                            id
                            name
                            cards_can_be_moved_to_phases {
                                id
                                name
                            }
                        }
                        pipe {
                            id
                        }
                        assignees {
                            id
                            username
                        }
                        child_relations {
                            name
                            cards {
                                id
                            }
                        }
                        fields {
                            name
                            value
                            phase_field {
                                id
                            }
                            array_value
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get a card"
        },

        "pipe_relations": {
            "query": """
                query pipe_relations($ids: [ID]!) {
                    pipe_relations(ids: $ids) {
                        id
                        name
                        parent
                        child
                        canCreateNewItems
                        canConnectExistingItems
                        canConnectMultipleItems
                        childMustExistToMoveParent
                        childMustExistToFinishParent
                        allChildrenMustBeDoneToMoveParent
                        allChildrenMustBeDoneToFinishParent
                        autoFillFieldEnabled
                        ownFieldMaps {
                            fieldId
                            inputMode
                            value
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Get pipe relations by ids"
        },

        "phase_cards": {
            "query": """
                query phase_cards($phaseId: ID!, $first: Int, $after: String) {
                    phase(id: $phaseId) {
                        cards_count
                        cards(first: $first, after: $after) {
                            edges {
                                node {
                                    id
                                    title
                                }
                            }
                            pageInfo {
                                ...PageInfoFields
                            }
                        }
                    }
                }
            """,
            "fragments": ["PageInfoFields"],
            "description": "Get one page of cards of a phase"
        },

        "phase_cards_count": {
            "query": """
                query phase_cards_count($phaseId: ID!) {
                    phase(id: $phaseId) {
                        cards_count
                    }
                }
            """,
            "fragments": [],
            "description": "Count cards of a phase"
        },

        "all_cards": {
            "query": """
                query all_cards($pipeId: ID!, $first: Int, $after: String) {
                    allCards(pipeId: $pipeId, first: $first, after: $after) {
                        edges {
                            node {
                                ...CardFields
                            }
                        }
                        pageInfo {
                            ...PageInfoFields
                        }
                    }
                }
            """,
            "fragments": ["CardFields", "PageInfoFields"],
            "description": "Get one page of all cards of a pipe"
        },

        "pipe_cards_count": {
            "query": """
                query pipe_cards_count($pipeId: ID!) {
                    pipe(id: $pipeId) {
                        cards_count
                    }
                }
            """,
            "fragments": [],
            "description": "Count cards of a pipe"
        },

        "table": {
            "query": """
                query table($id: ID!) {
                    table(id: $id) {
                        id
                        name
                        description
                        authorization
                        create_record_button_label
                        icon
                        public
                        public_form
                        labels {
                            id
                        }
                        members {
                            role_name
                        }
                        my_permissions {
                            can_manage_record
                            can_manage_table
                        }
                        summary_attributes {
                            id
                        }
                        summary_options {
                            name
                        }
                        table_fields {
                            ...TableFieldFields
                        }
                        title_field {
                            id
                        }
                        organization {
                            id
                        }
                        table_records_count
                    }
                }
            """,
            "fragments": ["TableFieldFields"],
            "description": "Get table metadata with fields and organization"
        },

        "table_fields": {
            "query": """
                query table_fields($id: ID!) {
                    table(id: $id) {
                        description
                        table_fields {
                            id
                            label
                            type
                            options
                        }
                        table_records_count
                    }
                }
            """,
            "fragments": [],
            "description": "Get the fields of a table"
        },

        "table_records": {
            "query": """
                query table_records($table_id: ID!, $first: Int, $after: String, $search: TableRecordSearch) {
                    table_records(table_id: $table_id, first: $first, after: $after, search: $search) {
                        matchCount
                        edges {
                            cursor
                            node {
                                ...TableRecordFields
                            }
                        }
                        pageInfo {
                            ...PageInfoFields
                        }
                    }
                }
            """,
            "fragments": ["TableRecordFields", "PageInfoFields"],
            "description": "Get one page of table records, optionally searched"
        },

        "table_records_count": {
            "query": """
                query table_records_count($id: ID!) {
                    table(id: $id) {
                        table_records_count
                    }
                }
            """,
            "fragments": [],
            "description": "Count records of a table"
        },
    }

    # Mutation operations
    MUTATIONS = {
        "createOrganization": {
            "query": """
                mutation createOrganization($industry: String!, $name: String!) {
                    createOrganization(input: {industry: $industry, name: $name}) {
                        organization {
                            id
                            name
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create an organization"
        },

        "updateOrganization": {
            "query": """
                mutation updateOrganization($id: ID!, $name: String!, $only_admin_can_create_pipes: Boolean, $only_admin_can_invite_users: Boolean, $force_omniauth_to_normal_users: Boolean) {
                    updateOrganization(input: {id: $id, name: $name, only_admin_can_create_pipes: $only_admin_can_create_pipes, only_admin_can_invite_users: $only_admin_can_invite_users, force_omniauth_to_normal_users: $force_omniauth_to_normal_users}) {
                        organization {
                            name
                            only_admin_can_create_pipes
                            only_admin_can_invite_users
                            force_omniauth_to_normal_users
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update an organization"
        },

        "deleteOrganization": {
            "query": """
                mutation deleteOrganization($id: ID!) {
                    deleteOrganization(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete an organization"
        },

        "clonePipes": {
            "query": """
                mutation clonePipes($organization_id: ID!, $pipe_template_ids: [ID]!) {
                    clonePipes(input: {organization_id: $organization_id, pipe_template_ids: $pipe_template_ids}) {
                        pipes {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Clone pipes from templates"
        },

        "createPipe": {
            "query": """
                mutation createPipe($name: String!, $organization_id: ID!, $labels: [LabelInput], $members: [MemberInput], $phases: [PhaseInput], $preferences: RepoPreferenceInput, $start_form_fields: [PhaseFieldInput]) {
                    createPipe(input: {name: $name, organization_id: $organization_id, labels: $labels, members: $members, phases: $phases, preferences: $preferences, start_form_fields: $start_form_fields}) {
                        pipe {
                            id
                            cards_count
                            created_at
                            last_updated_by_card
                            phases {
                                id
                                name
                                cards_count
                                fields {
                                    uuid
                                    id
                                    label
                                }
                            }
                            start_form_fields {
                                uuid
                                id
                                label
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a pipe"
        },

        "updatePipe": {
            "query": """
                mutation updatePipe($id: ID!, $name: String, $anyone_can_create_card: Boolean, $expiration_time_by_unit: Int, $expiration_unit: Int, $icon: String, $only_assignees_can_edit_cards: Boolean, $only_admin_can_remove_cards: Boolean, $preferences: RepoPreferenceInput, $public: Boolean, $public_form: Boolean, $publicFormSettings: PublicFormSettingsInput, $title_field_id: ID) {
                    updatePipe(input: {id: $id, name: $name, anyone_can_create_card: $anyone_can_create_card, expiration_time_by_unit: $expiration_time_by_unit, expiration_unit: $expiration_unit, icon: $icon, only_assignees_can_edit_cards: $only_assignees_can_edit_cards, only_admin_can_remove_cards: $only_admin_can_remove_cards, preferences: $preferences, public: $public, public_form: $public_form, publicFormSettings: $publicFormSettings, title_field_id: $title_field_id}) {
                        pipe {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a pipe"
        },

        "deletePipe": {
            "query": """
                mutation deletePipe($id: ID!) {
                    deletePipe(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a pipe"
        },

        "createPhase": {
            "query": """
                mutation createPhase($name: String!, $pipe_id: ID!, $can_receive_card_directly_from_draft: Boolean, $description: String, $done: Boolean, $lateness_time: Int, $only_admin_can_move_to_previous: Boolean) {
                    createPhase(input: {name: $name, pipe_id: $pipe_id, can_receive_card_directly_from_draft: $can_receive_card_directly_from_draft, description: $description, done: $done, lateness_time: $lateness_time, only_admin_can_move_to_previous: $only_admin_can_move_to_previous}) {
                        phase {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a phase in a pipe"
        },

        "updatePhase": {
            "query": """
                mutation updatePhase($id: ID!, $name: String!, $can_receive_card_directly_from_draft: Boolean, $description: String, $done: Boolean, $lateness_time: Int) {
                    updatePhase(input: {id: $id, name: $name, can_receive_card_directly_from_draft: $can_receive_card_directly_from_draft, description: $description, done: $done, lateness_time: $lateness_time}) {
                        phase {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a phase"
        },

        "deletePhase": {
            "query": """
                mutation deletePhase($id: ID!) {
                    deletePhase(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a phase"
        },

        "createPhaseField": {
            "query": """
                mutation createPhaseField($label: String!, $phase_id: ID!, $type: ID!, $allChildrenMustBeDoneToFinishParent: Boolean, $allChildrenMustBeDoneToMoveParent: Boolean, $canConnectExisting: Boolean, $canConnectMultiples: Boolean, $canCreateNewConnected: Boolean, $childMustExistToFinishParent: Boolean, $connectedRepoId: ID, $custom_validation: String, $description: String, $editable: Boolean, $help: String, $minimal_view: Boolean, $options: [String], $required: Boolean, $sync_with_card: Boolean) {
                    createPhaseField(input: {label: $label, phase_id: $phase_id, type: $type, allChildrenMustBeDoneToFinishParent: $allChildrenMustBeDoneToFinishParent, allChildrenMustBeDoneToMoveParent: $allChildrenMustBeDoneToMoveParent, canConnectExisting: $canConnectExisting, canConnectMultiples: $canConnectMultiples, canCreateNewConnected: $canCreateNewConnected, childMustExistToFinishParent: $childMustExistToFinishParent, connectedRepoId: $connectedRepoId, custom_validation: $custom_validation, description: $description, editable: $editable, help: $help, minimal_view: $minimal_view, options: $options, required: $required, sync_with_card: $sync_with_card}) {
                        phase_field {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a phase field"
        },

        "updatePhaseField": {
            "query": """
                mutation updatePhaseField($id: ID!, $label: String!, $allChildrenMustBeDoneToFinishParent: Boolean, $allChildrenMustBeDoneToMoveParent: Boolean, $canConnectExisting: Boolean, $canConnectMultiples: Boolean, $canCreateNewConnected: Boolean, $childMustExistToFinishParent: Boolean, $custom_validation: String, $description: String, $editable: Boolean, $help: String, $minimal_view: Boolean, $options: [String], $required: Boolean, $sync_with_card: Boolean) {
                    updatePhaseField(input: {id: $id, label: $label, allChildrenMustBeDoneToFinishParent: $allChildrenMustBeDoneToFinishParent, allChildrenMustBeDoneToMoveParent: $allChildrenMustBeDoneToMoveParent, canConnectExisting: $canConnectExisting, canConnectMultiples: $canConnectMultiples, canCreateNewConnected: $canCreateNewConnected, childMustExistToFinishParent: $childMustExistToFinishParent, custom_validation: $custom_validation, description: $description, editable: $editable, help: $help, minimal_view: $minimal_view, options: $options, required: $required, sync_with_card: $sync_with_card}) {
                        phase_field {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a phase field"
        },

        "deletePhaseField": {
            "query": """
                mutation deletePhaseField($id: ID!) {
                    deletePhaseField(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a phase field"
        },

        "createLabel": {
            "query": """
                mutation createLabel($color: String!, $name: String!, $pipe_id: ID, $table_id: ID) {
                    createLabel(input: {color: $color, name: $name, pipe_id: $pipe_id, table_id: $table_id}) {
                        label {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a label on a pipe or table"
        },

        "updateLabel": {
            "query": """
                mutation updateLabel($id: ID!, $color: String!, $name: String!) {
                    updateLabel(input: {id: $id, color: $color, name: $name}) {
                        label {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a label"
        },

        "deleteLabel": {
            "query": """
                mutation deleteLabel($id: ID!) {
                    deleteLabel(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a label"
        },

        "createCard": {
            "query": """
                mutation createCard($pipe_id: ID!, $assignee_ids: [ID], $attachments: [String], $due_date: DateTime, $fields_attributes: [FieldValueInput], $label_ids: [ID], $parent_ids: [ID], $phase_id: ID, $title: String) {
                    createCard(input: {pipe_id: $pipe_id, phase_id: $phase_id, parent_ids: $parent_ids, assignee_ids: $assignee_ids, attachments: $attachments, due_date: $due_date, fields_attributes: $fields_attributes, label_ids: $label_ids, title: $title}) {
                        card {
                            id
                            title
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a card"
        },

        "createCardRelation": {
            "query": """
                mutation createCardRelation($childId: ID!, $parentId: ID!, $sourceId: ID!, $sourceType: String!) {
                    createCardRelation(input: {childId: $childId, parentId: $parentId, sourceId: $sourceId, sourceType: $sourceType}) {
                        cardRelation {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Connect a child card to a parent card"
        },

        "updateCard": {
            "query": """
                mutation updateCard($id: ID!, $assignee_ids: [ID], $due_date: DateTime, $label_ids: [ID], $title: String) {
                    updateCard(input: {id: $id, assignee_ids: $assignee_ids, due_date: $due_date, label_ids: $label_ids, title: $title}) {
                        card {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a card"
        },

        "deleteCard": {
            "query": """
                mutation deleteCard($id: ID!) {
                    deleteCard(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a card"
        },

        "moveCardToPhase": {
            "query": """
                mutation moveCardToPhase($card_id: ID!, $destination_phase_id: ID!) {
                    moveCardToPhase(input: {card_id: $card_id, destination_phase_id: $destination_phase_id}) {
                        card {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Move a card to another phase"
        },

        "updateCardField": {
            "query": """
                mutation updateCardField($card_id: ID!, $field_id: ID!, $new_value: UndefinedInput) {
                    updateCardField(input: {card_id: $card_id, field_id: $field_id, new_value: $new_value}) {
                        card {
                            id
                        }
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Update the value of a card field"
        },

        "createComment": {
            "query": """
                mutation createComment($card_id: ID!, $text: String!) {
                    createComment(input: {card_id: $card_id, text: $text}) {
                        comment {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Comment on a card"
        },

        "updateComment": {
            "query": """
                mutation updateComment($id: ID!, $text: String!) {
                    updateComment(input: {id: $id, text: $text}) {
                        comment {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a comment"
        },

        "deleteComment": {
            "query": """
                mutation deleteComment($id: ID!) {
                    deleteComment(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a comment"
        },

        "setRole": {
            "query": """
                mutation setRole($member: MemberInput!, $organization_id: ID, $pipe_id: ID, $table_id: ID) {
                    setRole(input: {member: $member, organization_id: $organization_id, pipe_id: $pipe_id, table_id: $table_id}) {
                        member {
                            role_name
                            user {
                                id
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Set the role of a member"
        },

        "createPipeRelation": {
            "query": """
                mutation createPipeRelation($parentId: ID!, $childId: ID!, $name: String!, $autoFillFieldEnabled: Boolean!, $allChildrenMustBeDoneToMoveParent: Boolean!, $allChildrenMustBeDoneToFinishParent: Boolean!, $canConnectMultipleItems: Boolean!, $canConnectExistingItems: Boolean!, $canCreateNewItems: Boolean!, $childMustExistToMoveParent: Boolean!, $childMustExistToFinishParent: Boolean!, $ownFieldMaps: [FieldMapInput]) {
                    createPipeRelation(input: {parentId: $parentId, childId: $childId, name: $name, autoFillFieldEnabled: $autoFillFieldEnabled, allChildrenMustBeDoneToMoveParent: $allChildrenMustBeDoneToMoveParent, allChildrenMustBeDoneToFinishParent: $allChildrenMustBeDoneToFinishParent, canConnectMultipleItems: $canConnectMultipleItems, canConnectExistingItems: $canConnectExistingItems, canCreateNewItems: $canCreateNewItems, childMustExistToMoveParent: $childMustExistToMoveParent, childMustExistToFinishParent: $childMustExistToFinishParent, ownFieldMaps: $ownFieldMaps}) {
                        pipeRelation {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a pipe relation"
        },

        "updatePipeRelation": {
            "query": """
                mutation updatePipeRelation($id: ID!, $name: String!, $autoFillFieldEnabled: Boolean!, $allChildrenMustBeDoneToMoveParent: Boolean!, $allChildrenMustBeDoneToFinishParent: Boolean!, $canConnectMultipleItems: Boolean!, $canConnectExistingItems: Boolean!, $canCreateNewItems: Boolean!, $childMustExistToMoveParent: Boolean!, $childMustExistToFinishParent: Boolean!, $ownFieldMaps: [FieldMapInput]) {
                    updatePipeRelation(input: {id: $id, name: $name, autoFillFieldEnabled: $autoFillFieldEnabled, allChildrenMustBeDoneToMoveParent: $allChildrenMustBeDoneToMoveParent, allChildrenMustBeDoneToFinishParent: $allChildrenMustBeDoneToFinishParent, canConnectMultipleItems: $canConnectMultipleItems, canConnectExistingItems: $canConnectExistingItems, canCreateNewItems: $canCreateNewItems, childMustExistToMoveParent: $childMustExistToMoveParent, childMustExistToFinishParent: $childMustExistToFinishParent, ownFieldMaps: $ownFieldMaps}) {
                        pipeRelation {
                            id
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Update a pipe relation"
        },

        "deletePipeRelation": {
            "query": """
                mutation deletePipeRelation($id: ID!) {
                    deletePipeRelation(input: {id: $id}) {
                        clientMutationId
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a pipe relation"
        },

        "createWebhook": {
            "query": """
                mutation createWebhook($actions: [String]!, $name: String!, $url: String!, $email: String, $headers: Json, $pipe_id: ID, $table_id: ID) {
                    createWebhook(input: {actions: $actions, name: $name, url: $url, email: $email, headers: $headers, pipe_id: $pipe_id, table_id: $table_id}) {
                        webhook {
                            ...WebhookFields
                        }
                    }
                }
            """,
            "fragments": ["WebhookFields"],
            "description": "Create a webhook on a pipe or table"
        },

        "updateWebhook": {
            "query": """
                mutation updateWebhook($id: ID!, $actions: [String], $url: String, $email: String, $headers: Json) {
                    updateWebhook(input: {id: $id, actions: $actions, url: $url, email: $email, headers: $headers}) {
                        webhook {
                            ...WebhookFields
                        }
                    }
                }
            """,
            "fragments": ["WebhookFields"],
            "description": "Update a webhook"
        },

        "deleteWebhook": {
            "query": """
                mutation deleteWebhook($id: ID!) {
                    deleteWebhook(input: {id: $id}) {
                        clientMutationId
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a webhook"
        },

        "createTable": {
            "query": """
                mutation createTable($name: String!, $organization_id: ID!, $labels: [LabelInput], $public: Boolean, $description: String, $authorization: TableAuthorization, $members: [MemberInput]) {
                    createTable(input: {organization_id: $organization_id, name: $name, description: $description, public: $public, authorization: $authorization, labels: $labels, members: $members}) {
                        table {
                            id
                            name
                            description
                            public
                            authorization
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a table in an organization"
        },

        "deleteTable": {
            "query": """
                mutation deleteTable($id: ID!) {
                    deleteTable(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a table"
        },

        "createTableField": {
            "query": """
                mutation createTableField($table_id: ID!, $type: ID!, $label: String!, $options: [String], $description: String, $help: String, $required: Boolean, $minimal_view: Boolean, $custom_validation: String) {
                    createTableField(input: {table_id: $table_id, type: $type, label: $label, options: $options, description: $description, help: $help, required: $required, minimal_view: $minimal_view, custom_validation: $custom_validation}) {
                        table_field {
                            ...TableFieldFields
                        }
                    }
                }
            """,
            "fragments": ["TableFieldFields"],
            "description": "Create a table field"
        },

        "createTableRecord": {
            "query": """
                mutation createTableRecord($table_id: ID!, $title: String!, $due_date: DateTime, $fields_attributes: [FieldValueInput], $label_ids: [ID], $assignee_ids: [ID]) {
                    createTableRecord(input: {table_id: $table_id, title: $title, due_date: $due_date, fields_attributes: $fields_attributes, label_ids: $label_ids, assignee_ids: $assignee_ids}) {
                        table_record {
                            id
                            title
                            due_date
                            record_fields {
                                name
                                value
                            }
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Create a table record"
        },

        "deleteTableRecord": {
            "query": """
                mutation deleteTableRecord($id: ID!) {
                    deleteTableRecord(input: {id: $id}) {
                        success
                    }
                }
            """,
            "fragments": [],
            "description": "Delete a table record"
        },

        "setTableRecordFieldValue": {
            "query": """
                mutation setTableRecordFieldValue($table_record_id: ID!, $field_id: ID!, $value: [UndefinedInput]) {
                    setTableRecordFieldValue(input: {table_record_id: $table_record_id, field_id: $field_id, value: $value}) {
                        table_record {
                            id
                            title
                        }
                        table_record_field {
                            value
                        }
                    }
                }
            """,
            "fragments": [],
            "description": "Set the value of one field of a table record"
        },
    }

    @classmethod
    def get_operation_with_fragments(cls, operation_type: str, operation_name: str) -> str:
        """Get a complete GraphQL operation with all required fragments."""
        operations = cls.QUERIES if operation_type == "query" else cls.MUTATIONS

        if operation_name not in operations:
            raise ValueError(f"Operation {operation_name} not found in {operation_type}s")
        operation = operations[operation_name]
        fragments_needed = operation.get("fragments", [])

        fragment_definitions = [
            cls.FRAGMENTS[fragment_name]
            for fragment_name in fragments_needed
            if fragment_name in cls.FRAGMENTS
        ]

        if fragment_definitions:
            return "\n\n".join(fragment_definitions) + "\n\n" + operation["query"]
        return operation["query"]

    @classmethod
    def get_all_operations(cls) -> Dict[str, Dict[str, Any]]:
        """Get all available operations."""
        return {
            "queries": cls.QUERIES,
            "mutations": cls.MUTATIONS,
            "fragments": cls.FRAGMENTS
        }
