"""HTTP endpoints: status codes, JSON error bodies and the auth header contract."""

import io
import os

import tokens


def register(client, username='alice', email='a@x.com', password='secret1'):
    return client.post('/api/register', json={
        'username': username, 'email': email, 'password': password
    })


def login(client, email='a@x.com', password='secret1'):
    return client.post('/api/login', json={'email': email, 'password': password})


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


class TestAuthEndpoints:

    def test_register(self, client):
        response = register(client)

        assert response.status_code == 200
        body = response.get_json()
        assert body['username'] == 'alice'
        assert body['email'] == 'a@x.com'
        assert 'password' not in body and 'password_hash' not in body

    def test_register_duplicate(self, client):
        register(client)
        response = register(client, username='other')

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Email already registered'}

    def test_register_short_password(self, client):
        response = register(client, password='abc')

        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_login_returns_verifiable_token(self, client):
        user = register(client).get_json()

        response = login(client)
        assert response.status_code == 200
        body = response.get_json()
        assert body['user'] == {'id': user['id'], 'username': 'alice'}

        me = client.get('/api/me', headers=bearer(body['token']))
        assert me.status_code == 200
        assert me.get_json() == {'id': user['id'], 'username': 'alice'}

    def test_login_bad_password(self, client):
        register(client)

        response = login(client, password='wrong-one')

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid credentials'}

    def test_login_missing_fields(self, client):
        response = client.post('/api/login', json={'email': 'a@x.com'})
        assert response.status_code == 400

    def test_non_object_json_body(self, client):
        response = client.post('/api/register', json=['alice'])
        assert response.status_code == 400

    def test_login_with_numeric_password(self, client):
        register(client)

        response = client.post('/api/login', json={'email': 'a@x.com', 'password': 1234567})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid credentials'}

    def test_register_with_object_username(self, client):
        response = client.post('/api/register', json={
            'username': {'a': 1}, 'email': 'a@x.com', 'password': 'secret1'
        })

        assert response.status_code == 400
        assert login(client).status_code == 400


class TestGuard:

    def test_missing_token_is_401(self, client):
        response = client.post('/api/posts', json={'title': 'Hi', 'category': 'news'})

        assert response.status_code == 401
        assert response.get_json() == {'error': 'Authorization required'}

    def test_invalid_token_is_403(self, client):
        response = client.post('/api/posts', json={'title': 'Hi', 'category': 'news'},
                               headers=bearer('garbage'))

        assert response.status_code == 403
        assert response.get_json() == {'error': 'Invalid token'}

    def test_wrong_scheme_is_403(self, client, alice, auth_header):
        token = auth_header(alice)['Authorization'].split(' ', 1)[1]

        response = client.get('/api/me', headers={'Authorization': f'Basic {token}'})

        assert response.status_code == 403

    def test_read_endpoints_are_public(self, client):
        assert client.get('/api/posts').status_code == 200
        assert client.get('/api/posts/1/comments').status_code == 200


class TestPostEndpoints:

    def test_create_json_post(self, client, alice, auth_header):
        response = client.post('/api/posts', json={
            'title': 'Hi', 'content': 'Hello', 'category': 'news'
        }, headers=auth_header(alice))

        assert response.status_code == 201
        body = response.get_json()
        assert body['username'] == 'alice'
        assert body['comments'] == []
        assert body['image'] is None

    def test_create_requires_category(self, client, alice, auth_header):
        response = client.post('/api/posts', json={'title': 'Hi'}, headers=auth_header(alice))

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Category is required'}

    def test_create_with_image_and_serve_it(self, app, client, alice, auth_header):
        response = client.post('/api/posts', data={
            'title': 'Pic', 'content': '', 'category': 'photos',
            'image': (io.BytesIO(b'fake-png-bytes'), 'photo.PNG'),
        }, content_type='multipart/form-data', headers=auth_header(alice))

        assert response.status_code == 201
        image = response.get_json()['image']
        assert image.startswith('/uploads/') and image.endswith('.png')
        assert os.path.exists(os.path.join(app.config['UPLOAD_FOLDER'], os.path.basename(image)))

        served = client.get(image)
        assert served.status_code == 200
        assert served.data == b'fake-png-bytes'
        served.close()

    def test_unsupported_image_type(self, app, client, alice, auth_header):
        response = client.post('/api/posts', data={
            'title': 'Script', 'category': 'news',
            'image': (io.BytesIO(b'#!/bin/sh'), 'run.sh'),
        }, content_type='multipart/form-data', headers=auth_header(alice))

        assert response.status_code == 400
        assert os.listdir(app.config['UPLOAD_FOLDER']) == []

    def test_delete_ownership(self, client, alice, bob, auth_header):
        post_id = client.post('/api/posts', json={'title': 'Hi', 'category': 'news'},
                              headers=auth_header(alice)).get_json()['id']

        forbidden = client.delete(f'/api/posts/{post_id}', headers=auth_header(bob))
        assert forbidden.status_code == 403

        deleted = client.delete(f'/api/posts/{post_id}', headers=auth_header(alice))
        assert deleted.status_code == 200
        assert deleted.get_json() == {'success': True}

        missing = client.delete(f'/api/posts/{post_id}', headers=auth_header(alice))
        assert missing.status_code == 404
        assert client.get('/api/posts').get_json() == []

    def test_delete_removes_uploaded_image(self, app, client, alice, auth_header):
        post = client.post('/api/posts', data={
            'title': 'Pic', 'category': 'photos',
            'image': (io.BytesIO(b'gif'), 'cat.gif'),
        }, content_type='multipart/form-data', headers=auth_header(alice)).get_json()

        client.delete(f"/api/posts/{post['id']}", headers=auth_header(alice))

        assert os.listdir(app.config['UPLOAD_FOLDER']) == []

    def test_delete_requires_token(self, client):
        assert client.delete('/api/posts/1').status_code == 401

    def test_image_removed_when_post_insert_fails(self, app, client):
        token = tokens.issue(4242, 'ghost')

        response = client.post('/api/posts', data={
            'title': 'Pic', 'category': 'photos',
            'image': (io.BytesIO(b'png'), 'ghost.png'),
        }, content_type='multipart/form-data', headers=bearer(token))

        assert response.status_code == 404
        assert os.listdir(app.config['UPLOAD_FOLDER']) == []

    def test_oversized_post_id_is_404(self, client, alice, auth_header):
        huge = 10 ** 23

        assert client.delete(f'/api/posts/{huge}', headers=auth_header(alice)).status_code == 404
        assert client.get(f'/api/posts/{huge}/comments').status_code == 404
        response = client.post(f'/api/posts/{huge}/comments', json={'content': 'hi'},
                               headers=auth_header(alice))
        assert response.status_code == 404
        assert 'error' in response.get_json()


class TestCommentEndpoints:

    def test_comment_on_missing_post(self, client, alice, auth_header):
        response = client.post('/api/posts/999/comments', json={'content': 'hi'},
                               headers=auth_header(alice))

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Post not found'}

    def test_empty_comment(self, client, alice, auth_header):
        post_id = client.post('/api/posts', json={'category': 'news'},
                              headers=auth_header(alice)).get_json()['id']

        response = client.post(f'/api/posts/{post_id}/comments', json={'content': ''},
                               headers=auth_header(alice))

        assert response.status_code == 400

    def test_comments_listed_oldest_first(self, client, alice, bob, auth_header):
        post_id = client.post('/api/posts', json={'category': 'news'},
                              headers=auth_header(alice)).get_json()['id']
        for user, text in [(bob, 'first'), (alice, 'second'), (bob, 'third')]:
            response = client.post(f'/api/posts/{post_id}/comments', json={'content': text},
                                   headers=auth_header(user))
            assert response.status_code == 201

        comments = client.get(f'/api/posts/{post_id}/comments').get_json()

        assert [c['content'] for c in comments] == ['first', 'second', 'third']
        assert [c['username'] for c in comments] == ['bob', 'alice', 'bob']


class TestMisc:

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert 'error' in response.get_json()

    def test_welcome(self, client):
        assert client.get('/').get_json()['status'] == 'ok'


class TestEndToEnd:

    def test_full_flow(self, client):
        register(client)
        token = login(client).get_json()['token']

        post = client.post('/api/posts', json={'title': 'Hi', 'category': 'news'},
                           headers=bearer(token))
        assert post.status_code == 201

        comment = client.post(f"/api/posts/{post.get_json()['id']}/comments",
                              json={'content': 'nice'}, headers=bearer(token))
        assert comment.status_code == 201

        posts = client.get('/api/posts').get_json()
        assert len(posts[0]['comments']) == 1
