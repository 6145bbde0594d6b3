from fastapi.testclient import TestClient
from infraction_reporter.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nINFRACTION TYPES:')
print([t['id'] for t in client.get('/api/infraction-types').json()])

print('\nGEOCODING (live service):')
try:
    resp = client.get('/api/geocoding/reverse', params={'lat': -34.6037, 'lng': -58.3816})
    print(resp.status_code, resp.json())
except Exception as e:
    print('Geocoding call raised exception:', e)
